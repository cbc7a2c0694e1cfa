"""Study, series and instance records exchanged with data sources."""

from pydantic import BaseModel, Field


class InstanceRecord(BaseModel):
    """A single DICOM instance within a series."""

    sop_instance_uid: str
    sop_class_uid: str | None = None
    instance_number: int | None = None
    modality: str | None = None
    file_name: str | None = None


class SeriesRecord(BaseModel):
    """A DICOM series and the instances known for it."""

    series_instance_uid: str
    modality: str | None = None
    series_number: int | None = None
    series_description: str | None = None
    instances: list[InstanceRecord] = Field(default_factory=list)

    def has_modality(self, modality: str) -> bool:
        """Check the series modality, falling back to its first instance."""
        if self.modality == modality:
            return True
        return bool(self.instances) and self.instances[0].modality == modality


class StudyRecord(BaseModel):
    """Study-level record as returned by a data source search."""

    study_instance_uid: str
    patient_id: str | None = None
    patient_name: str | None = None
    study_date: str | None = None
    study_time: str | None = None
    study_description: str | None = None
    accession_number: str | None = None
    modalities_in_study: list[str] = Field(default_factory=list)
    number_of_instances: int | None = None
    series: list[SeriesRecord] = Field(default_factory=list)

    def get_series(self, series_uid: str) -> SeriesRecord | None:
        """Look up a series by its UID."""
        for series in self.series:
            if series.series_instance_uid == series_uid:
                return series
        return None

    def has_modality(self, modality: str) -> bool:
        """Check whether any series of the study carries the given modality."""
        return any(series.has_modality(modality) for series in self.series)
