"""Data sources and their selection."""

from studygate.services.datasource.dicomweb import DicomWebDataSource
from studygate.services.datasource.local import LocalDataSource
from studygate.services.datasource.registry import (
    DataSourceHandle,
    DataSourceRegistry,
    ModuleDefinition,
    ModuleKind,
)
from studygate.services.datasource.resolver import DataSourceResolver, ResolvedDataSource

__all__ = [
    "DataSourceHandle",
    "DataSourceRegistry",
    "DataSourceResolver",
    "DicomWebDataSource",
    "LocalDataSource",
    "ModuleDefinition",
    "ModuleKind",
    "ResolvedDataSource",
]
