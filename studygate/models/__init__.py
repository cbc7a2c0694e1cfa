"""Data models for StudyGate."""

from .archive import (
    DICOM_CONTENT_TYPE,
    ArchiveEntry,
    ArchiveNode,
    EntryKind,
    MaterializedFile,
)
from .ingestion import IngestionResult, IngestionStatus, RouteDecision
from .query import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_RESULTS_PER_PAGE,
    INVALID_LOCATION,
    CacheAction,
    NavigationContext,
    QueryFilter,
    ResultWindow,
)
from .study import InstanceRecord, SeriesRecord, StudyRecord
from .study_list import StudyListPage

__all__ = [
    "DEFAULT_PAGE_NUMBER",
    "DEFAULT_RESULTS_PER_PAGE",
    "DICOM_CONTENT_TYPE",
    "INVALID_LOCATION",
    "ArchiveEntry",
    "ArchiveNode",
    "CacheAction",
    "EntryKind",
    "IngestionResult",
    "IngestionStatus",
    "InstanceRecord",
    "MaterializedFile",
    "NavigationContext",
    "QueryFilter",
    "ResultWindow",
    "RouteDecision",
    "SeriesRecord",
    "StudyListPage",
    "StudyRecord",
]
