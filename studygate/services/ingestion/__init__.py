"""Local archive ingestion: decompression, conversion and modality routing."""

from studygate.services.ingestion.archive import ArchiveDecompressor
from studygate.services.ingestion.converter import FileToStudyConverter
from studygate.services.ingestion.router import ModalityRouter
from studygate.services.ingestion.service import LocalIngestionService, source_url_from_search

__all__ = [
    "ArchiveDecompressor",
    "FileToStudyConverter",
    "LocalIngestionService",
    "ModalityRouter",
    "source_url_from_search",
]
