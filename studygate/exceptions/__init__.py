"""Exceptions for StudyGate."""

from .domain import (
    ArchiveDecodeError,
    DataSourceError,
    FileMaterializationError,
    IngestionError,
    NoDataSourceFoundError,
    NoStudiesFoundError,
    SearchFailedError,
    SourceFetchError,
    StudyGateError,
    ValidationError,
)

__all__ = [
    "ArchiveDecodeError",
    "DataSourceError",
    "FileMaterializationError",
    "IngestionError",
    "NoDataSourceFoundError",
    "NoStudiesFoundError",
    "SearchFailedError",
    "SourceFetchError",
    "StudyGateError",
    "ValidationError",
]
