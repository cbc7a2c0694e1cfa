"""Factories for in-memory DICOM files, ZIP archives and fake data sources."""

import asyncio
import io
import zipfile
from collections.abc import Iterable

from pydicom import Dataset
from pydicom.dataset import FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian, SecondaryCaptureImageStorage

from studygate.models import QueryFilter, StudyRecord


def make_dicom_bytes(
    study_uid: str = "1.2.3.4",
    series_uid: str = "1.2.3.4.5",
    sop_uid: str = "1.2.3.4.5.6",
    modality: str = "CT",
    patient_id: str = "P001",
    patient_name: str = "Doe^John",
    study_date: str = "20240101",
    study_description: str = "Chest",
) -> bytes:
    """Create a minimal DICOM Part 10 file without pixel data."""
    ds = Dataset()
    ds.PatientID = patient_id
    ds.PatientName = patient_name
    ds.StudyInstanceUID = study_uid
    ds.StudyDate = study_date
    ds.StudyDescription = study_description
    ds.SeriesInstanceUID = series_uid
    ds.SeriesNumber = 1
    ds.Modality = modality
    ds.SOPInstanceUID = sop_uid
    ds.SOPClassUID = SecondaryCaptureImageStorage
    ds.InstanceNumber = 1

    ds.file_meta = FileMetaDataset()
    ds.file_meta.TransferSyntaxUID = ExplicitVRLittleEndian
    ds.file_meta.MediaStorageSOPClassUID = SecondaryCaptureImageStorage
    ds.file_meta.MediaStorageSOPInstanceUID = sop_uid

    buffer = io.BytesIO()
    ds.save_as(buffer, enforce_file_format=True)
    return buffer.getvalue()


def make_zip(files: dict[str, bytes], directories: Iterable[str] = ()) -> bytes:
    """Create a ZIP archive in memory; entries keep the given order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for directory in directories:
            zf.writestr(zipfile.ZipInfo(directory.rstrip("/") + "/"), b"")
        for name, data in files.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def make_nested_zip(levels: int, files: dict[str, bytes]) -> bytes:
    """Wrap ``files`` in ``levels`` layers of single-nested ZIP archives."""
    data = make_zip(files)
    for level in range(levels):
        data = make_zip({f"level{level}.zip": data})
    return data


def make_study(study_uid: str, **kwargs: object) -> StudyRecord:
    return StudyRecord(study_instance_uid=study_uid, **kwargs)


class FakeDataSource:
    """Data source returning canned studies and recording the filters it saw.

    If ``gate`` is set, searches block until it is released, which lets tests
    interleave overlapping fetches.
    """

    def __init__(
        self,
        studies: list[StudyRecord] | None = None,
        error: Exception | None = None,
    ):
        self.studies = studies or []
        self.error = error
        self.calls: list[QueryFilter] = []
        self.gate: asyncio.Event | None = None

    async def search(self, query_filter: QueryFilter) -> list[StudyRecord]:
        self.calls.append(query_filter)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.studies)
