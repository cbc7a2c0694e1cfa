"""
Domain exceptions for the data-acquisition layer.

These exceptions are used in services and data sources to represent
failures without coupling to HTTP status codes.
"""


class StudyGateError(Exception):
    """Base exception for all StudyGate-specific errors."""

    pass


class ValidationError(StudyGateError):
    """Raised when request data validation fails."""

    pass


# Data source exceptions
class DataSourceError(StudyGateError):
    """Base exception for data source errors."""

    pass


class NoDataSourceFoundError(DataSourceError):
    """Raised when no registered data source can serve the current view."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        super().__init__(f"No data source found for {name}")


class SearchFailedError(DataSourceError):
    """Raised when a data source search does not complete."""

    def __init__(self, data_source: str, reason: str | None = None) -> None:
        self.data_source = data_source
        if reason:
            super().__init__(f"Search on data source '{data_source}' failed: {reason}")
        else:
            super().__init__(f"Search on data source '{data_source}' failed")


# Local ingestion exceptions
class IngestionError(StudyGateError):
    """Base exception for local archive ingestion failures."""

    pass


class SourceFetchError(IngestionError):
    """Raised when the archive bytes cannot be fetched from their URL."""

    def __init__(self, url: str, reason: str | None = None) -> None:
        self.url = url
        if reason:
            super().__init__(f"Failed to fetch '{url}': {reason}")
        else:
            super().__init__(f"Failed to fetch '{url}'")


class ArchiveDecodeError(IngestionError):
    """Raised when bytes cannot be decoded as an archive."""

    pass


class FileMaterializationError(IngestionError):
    """Raised when an archive entry cannot be materialized as a file."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        if reason:
            super().__init__(f"Failed to materialize '{name}': {reason}")
        else:
            super().__init__(f"Failed to materialize '{name}'")


class NoStudiesFoundError(IngestionError):
    """Raised when an ingested archive contains no readable DICOM studies."""

    def __init__(self) -> None:
        super().__init__("No DICOM studies found in archive")
