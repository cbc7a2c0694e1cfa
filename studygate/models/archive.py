"""Models for opened archives and the files materialized from them.

Not Pydantic models because an open ``zipfile.ZipFile`` is not serializable.
"""

import zipfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Self

DICOM_CONTENT_TYPE = "application/dicom"


class EntryKind(str, Enum):
    """Classification of an archive entry."""

    DIRECTORY = "directory"
    NESTED_ARCHIVE = "nested_archive"
    LEAF = "leaf"


@dataclass(slots=True, frozen=True)
class ArchiveEntry:
    """One named entry of an archive."""

    name: str
    kind: EntryKind
    size: int = 0


@dataclass(slots=True)
class ArchiveNode:
    """An opened archive with its entries in archive order.

    ``depth`` counts the nested-archive descents performed to reach this node.
    """

    archive: zipfile.ZipFile = field(repr=False)
    entries: list[ArchiveEntry]
    depth: int = 0

    @property
    def nested_archives(self) -> list[ArchiveEntry]:
        return [e for e in self.entries if e.kind is EntryKind.NESTED_ARCHIVE]

    @property
    def leaves(self) -> list[ArchiveEntry]:
        return [e for e in self.entries if e.kind is EntryKind.LEAF]

    def read(self, name: str) -> bytes:
        """Read the raw bytes of an entry (blocking, call via to_thread)."""
        return self.archive.read(name)

    @property
    def closed(self) -> bool:
        return self.archive.fp is None

    def close(self) -> None:
        self.archive.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(slots=True, frozen=True)
class MaterializedFile:
    """A named byte buffer produced from one leaf entry."""

    name: str
    data: bytes = field(repr=False)
    content_type: str = DICOM_CONTENT_TYPE
