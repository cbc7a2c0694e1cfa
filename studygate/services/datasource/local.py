"""Data source answering searches from locally ingested studies."""

from pydantic.alias_generators import to_snake

from studygate.models import QueryFilter, StudyRecord
from studygate.services.metadata_store import MetadataStore


def _contains(value: str | None, needle: str | None) -> bool:
    if not needle:
        return True
    return value is not None and needle.strip("*").lower() in value.lower()


def _in_date_range(study_date: str | None, start: str | None, end: str | None) -> bool:
    if not start and not end:
        return True
    if not study_date:
        return False
    if start and study_date < start.replace("-", ""):
        return False
    return not (end and study_date > end.replace("-", ""))


def matches(study: StudyRecord, query_filter: QueryFilter) -> bool:
    """Check a study against the criteria of a filter."""
    if query_filter.patient_id and study.patient_id != query_filter.patient_id:
        return False
    if query_filter.accession_number and study.accession_number != query_filter.accession_number:
        return False
    if not _contains(study.patient_name, query_filter.patient_name):
        return False
    if not _contains(study.study_description, query_filter.study_description):
        return False
    if query_filter.modalities_in_study and not set(query_filter.modalities_in_study) & set(
        study.modalities_in_study
    ):
        return False
    return _in_date_range(study.study_date, query_filter.start_date, query_filter.end_date)


class LocalDataSource:
    """Searches the metadata store populated by local archive ingestion."""

    def __init__(self, name: str, store: MetadataStore):
        self.name = name
        self._store = store

    async def search(self, query_filter: QueryFilter) -> list[StudyRecord]:
        studies = [s for s in self._store.studies() if matches(s, query_filter)]
        if query_filter.sort_by:
            reverse = (query_filter.sort_direction or "").lower() in ("descending", "desc")
            key = to_snake(query_filter.sort_by)
            studies.sort(key=lambda s: str(getattr(s, key, "") or ""), reverse=reverse)
        return studies
