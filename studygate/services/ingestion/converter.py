"""Conversion of archive entries into files and files into study records."""

import asyncio
from io import BytesIO

import pydicom
from pydicom import Dataset
from pydicom.errors import InvalidDicomError

from studygate.exceptions.domain import FileMaterializationError
from studygate.models import (
    DICOM_CONTENT_TYPE,
    ArchiveEntry,
    ArchiveNode,
    EntryKind,
    InstanceRecord,
    MaterializedFile,
    SeriesRecord,
    StudyRecord,
)
from studygate.services.ingestion.archive import ZIP_READ_ERRORS
from studygate.services.metadata_store import MetadataStore
from studygate.utils.logger import component_logger

logger = component_logger("ingestion")


def _value(ds: Dataset, keyword: str) -> str | None:
    value = ds.get(keyword)
    if value is None or value == "":
        return None
    return str(value)


def _int_value(ds: Dataset, keyword: str) -> int | None:
    value = ds.get(keyword)
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def records_from_dataset(
    ds: Dataset, file_name: str
) -> tuple[StudyRecord, SeriesRecord, InstanceRecord]:
    """Split a DICOM header into study, series and instance records.

    Raises:
        InvalidDicomError: If the identifying UIDs are missing
    """
    study_uid = _value(ds, "StudyInstanceUID")
    series_uid = _value(ds, "SeriesInstanceUID")
    sop_uid = _value(ds, "SOPInstanceUID")
    if not (study_uid and series_uid and sop_uid):
        raise InvalidDicomError(f"{file_name} lacks Study/Series/SOP Instance UIDs")

    modality = _value(ds, "Modality")
    study = StudyRecord(
        study_instance_uid=study_uid,
        patient_id=_value(ds, "PatientID"),
        patient_name=_value(ds, "PatientName"),
        study_date=_value(ds, "StudyDate"),
        study_time=_value(ds, "StudyTime"),
        study_description=_value(ds, "StudyDescription"),
        accession_number=_value(ds, "AccessionNumber"),
    )
    series = SeriesRecord(
        series_instance_uid=series_uid,
        modality=modality,
        series_number=_int_value(ds, "SeriesNumber"),
        series_description=_value(ds, "SeriesDescription"),
    )
    instance = InstanceRecord(
        sop_instance_uid=sop_uid,
        sop_class_uid=_value(ds, "SOPClassUID"),
        instance_number=_int_value(ds, "InstanceNumber"),
        modality=modality,
        file_name=file_name,
    )
    return study, series, instance


class FileToStudyConverter:
    """Materializes archive leaves and groups them into studies in the metadata store."""

    def __init__(self, store: MetadataStore):
        self._store = store

    async def _materialize_entry(self, node: ArchiveNode, entry: ArchiveEntry) -> MaterializedFile:
        try:
            data = await asyncio.to_thread(node.read, entry.name)
        except (*ZIP_READ_ERRORS, KeyError) as e:
            raise FileMaterializationError(entry.name, str(e)) from e
        return MaterializedFile(name=entry.name, data=data, content_type=DICOM_CONTENT_TYPE)

    async def materialize(self, node: ArchiveNode) -> list[MaterializedFile]:
        """Read every non-directory entry of a final archive node.

        Entries are read concurrently; the order of the result is not significant.

        Raises:
            FileMaterializationError: If any entry cannot be read
        """
        entries = [e for e in node.entries if e.kind is not EntryKind.DIRECTORY]
        files = await asyncio.gather(*(self._materialize_entry(node, e) for e in entries))
        logger.info(f"Materialized {len(files)} files from archive")
        return list(files)

    @staticmethod
    def _read_header(file: MaterializedFile) -> Dataset:
        return pydicom.dcmread(BytesIO(file.data), stop_before_pixels=True, force=False)

    async def _parse(self, file: MaterializedFile) -> Dataset | None:
        try:
            return await asyncio.to_thread(self._read_header, file)
        except (InvalidDicomError, EOFError, OSError, ValueError, TypeError) as e:
            logger.warning(f"Skipping non-DICOM file '{file.name}': {e}")
            return None

    async def convert(self, files: list[MaterializedFile]) -> list[str]:
        """Parse DICOM files and register their instances in the metadata store.

        Files that are not DICOM are skipped with a warning.

        Returns:
            StudyInstanceUIDs of the converted studies, in first-seen order
        """
        datasets = await asyncio.gather(*(self._parse(f) for f in files))

        study_uids: list[str] = []
        for file, ds in zip(files, datasets, strict=True):
            if ds is None:
                continue
            try:
                study, series, instance = records_from_dataset(ds, file.name)
            except InvalidDicomError as e:
                logger.warning(f"Skipping '{file.name}': {e}")
                continue
            self._store.add_instance(study, series, instance)
            if study.study_instance_uid not in study_uids:
                study_uids.append(study.study_instance_uid)

        logger.info(f"Converted {len(files)} files into {len(study_uids)} studies")
        return study_uids
