"""In-memory store of study metadata ingested from local files."""

from cachetools import LRUCache

from studygate.models import InstanceRecord, SeriesRecord, StudyRecord
from studygate.utils.logger import logger


class MetadataStore:
    """Study/series/instance records keyed by StudyInstanceUID.

    Bounded by an LRU cache so long-running processes do not accumulate every
    study ever ingested.
    """

    def __init__(self, max_studies: int = 500):
        self._studies: LRUCache[str, StudyRecord] = LRUCache(maxsize=max_studies)

    def __len__(self) -> int:
        return len(self._studies)

    def __contains__(self, study_uid: object) -> bool:
        return study_uid in self._studies

    def get_study(self, study_uid: str) -> StudyRecord | None:
        return self._studies.get(study_uid)

    def studies(self) -> list[StudyRecord]:
        return list(self._studies.values())

    def add_study(self, study: StudyRecord) -> StudyRecord:
        """Insert a study record, keeping already known series of the same study."""
        existing = self._studies.get(study.study_instance_uid)
        if existing is not None:
            for series in study.series:
                if existing.get_series(series.series_instance_uid) is None:
                    existing.series.append(series)
            return existing
        self._studies[study.study_instance_uid] = study
        return study

    def add_instance(
        self,
        study: StudyRecord,
        series: SeriesRecord,
        instance: InstanceRecord,
    ) -> StudyRecord:
        """Add one instance, creating its study and series records as needed.

        ``study`` and ``series`` carry the attributes to use when the records do
        not exist yet; their nested lists are ignored.

        Returns:
            The stored study record
        """
        stored = self._studies.get(study.study_instance_uid)
        if stored is None:
            stored = study.model_copy(update={"series": []})
            self._studies[stored.study_instance_uid] = stored

        stored_series = stored.get_series(series.series_instance_uid)
        if stored_series is None:
            stored_series = series.model_copy(update={"instances": []})
            stored.series.append(stored_series)

        if all(i.sop_instance_uid != instance.sop_instance_uid for i in stored_series.instances):
            stored_series.instances.append(instance)
        else:
            logger.debug(f"Instance {instance.sop_instance_uid} already known, skipping")

        if series.modality and series.modality not in stored.modalities_in_study:
            stored.modalities_in_study.append(series.modality)
        stored.number_of_instances = sum(len(s.instances) for s in stored.series)
        return stored

    def clear(self) -> None:
        self._studies.clear()
