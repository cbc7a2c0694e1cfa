"""DICOMweb data source: study searches via QIDO-RS."""

from typing import Any

import httpx
from pydicom import Dataset

from studygate.models import QueryFilter, StudyRecord
from studygate.services.query.filters import STUDIES_LIMIT
from studygate.types import DicomJSON, QueryParams
from studygate.utils.logger import component_logger

DICOM_JSON_CONTENT_TYPE = "application/dicom+json"

# Study-level attributes requested in addition to the QIDO-RS defaults
INCLUDE_FIELDS = "00081030,00080060,00201208"


def _date_range(start: str | None, end: str | None) -> str | None:
    """Build a DICOM date range (``start-end``) from ISO or DICOM dates."""
    if not start and not end:
        return None
    start = (start or "").replace("-", "")
    end = (end or "").replace("-", "")
    return f"{start}-{end}"


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def study_from_dicom_json(obj: DicomJSON) -> StudyRecord:
    """Convert one QIDO-RS study result to a StudyRecord.

    Raises:
        ValueError: If the result has no StudyInstanceUID
    """
    ds = Dataset.from_json(obj)
    study_uid = _str_or_none(ds.get("StudyInstanceUID"))
    if study_uid is None:
        raise ValueError("QIDO-RS result without StudyInstanceUID")

    modalities = ds.get("ModalitiesInStudy")
    if modalities is None:
        modalities_list: list[str] = []
    elif isinstance(modalities, str):
        modalities_list = [m for m in modalities.split("\\") if m]
    else:
        modalities_list = [str(m) for m in modalities]

    return StudyRecord(
        study_instance_uid=study_uid,
        patient_id=_str_or_none(ds.get("PatientID")),
        patient_name=_str_or_none(ds.get("PatientName")),
        study_date=_str_or_none(ds.get("StudyDate")),
        study_time=_str_or_none(ds.get("StudyTime")),
        study_description=_str_or_none(ds.get("StudyDescription")),
        accession_number=_str_or_none(ds.get("AccessionNumber")),
        modalities_in_study=modalities_list,
        number_of_instances=_int_or_none(ds.get("NumberOfStudyRelatedInstances")),
    )


class DicomWebDataSource:
    """Data source backed by a DICOMweb server's QIDO-RS endpoint.

    The whole offset bucket (``studies_limit`` studies) is requested at once;
    logical pages inside one bucket are served from the cached window.
    """

    def __init__(
        self,
        name: str,
        qido_root: str,
        client: httpx.AsyncClient,
        studies_limit: int = STUDIES_LIMIT,
        fuzzy_matching: bool = False,
    ):
        """Initialize the data source.

        Args:
            name: Data source name
            qido_root: Base URL of the QIDO-RS service
            client: Shared HTTP client
            studies_limit: Maximum number of studies per request
            fuzzy_matching: Ask the server for fuzzy person name matching
        """
        self.name = name
        self.qido_root = qido_root.rstrip("/")
        self._client = client
        self._studies_limit = studies_limit
        self._log = component_logger(f"dicomweb[{name}]")
        self._fuzzy_matching = fuzzy_matching

    def map_params(self, query_filter: QueryFilter) -> QueryParams:
        """Translate a QueryFilter into QIDO-RS query parameters."""
        params: QueryParams = {
            "PatientID": query_filter.patient_id,
            "PatientName": query_filter.patient_name,
            "StudyDescription": query_filter.study_description,
            "AccessionNumber": query_filter.accession_number,
            "StudyDate": _date_range(query_filter.start_date, query_filter.end_date),
            "limit": self._studies_limit,
            "offset": query_filter.offset,
            "includefield": INCLUDE_FIELDS,
        }
        if query_filter.modalities_in_study:
            params["ModalitiesInStudy"] = ",".join(query_filter.modalities_in_study)
        if self._fuzzy_matching:
            params["fuzzymatching"] = "true"
        return {key: value for key, value in params.items() if value is not None}

    async def search(self, query_filter: QueryFilter) -> list[StudyRecord]:
        """QIDO-RS: search for studies.

        Args:
            query_filter: Normalized search criteria

        Returns:
            Matching studies; empty when the server has no content

        Raises:
            httpx.HTTPError: If the request fails or returns an error status
        """
        params = self.map_params(query_filter)
        response = await self._client.get(
            f"{self.qido_root}/studies",
            params=params,
            headers={"Accept": DICOM_JSON_CONTENT_TYPE},
        )
        response.raise_for_status()

        # 204: no content
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return []

        studies = []
        for obj in response.json():
            try:
                studies.append(study_from_dicom_json(obj))
            except ValueError as e:
                self._log.warning(f"Skipping QIDO-RS result from '{self.name}': {e}")
        self._log.info(f"QIDO-RS: found {len(studies)} studies on '{self.name}'")
        return studies
