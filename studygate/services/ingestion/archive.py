"""Recursive decompression of (possibly nested) ZIP archives."""

import asyncio
import io
import zipfile
import zlib

from studygate.exceptions.domain import ArchiveDecodeError
from studygate.models import ArchiveEntry, ArchiveNode, EntryKind
from studygate.utils.logger import component_logger

logger = component_logger("ingestion")

# Errors zipfile raises for corrupt, encrypted or unsupported entries
ZIP_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


class ArchiveDecompressor:
    """Opens an archive and descends into nested archives until none remain.

    Only the first nested archive (in archive order) is followed at each level;
    sibling nested archives and the leaf files next to it are not carried into
    the final node.
    """

    def __init__(self, extension: str = ".zip", max_depth: int = 32):
        """Initialize the decompressor.

        Args:
            extension: File name suffix identifying nested archives
            max_depth: Maximum number of nested levels to descend
        """
        self._extension = extension.lower()
        self._max_depth = max_depth

    def classify(self, info: zipfile.ZipInfo) -> EntryKind:
        if info.is_dir():
            return EntryKind.DIRECTORY
        if info.filename.lower().endswith(self._extension):
            return EntryKind.NESTED_ARCHIVE
        return EntryKind.LEAF

    def open(self, data: bytes, depth: int = 0) -> ArchiveNode:
        """Open a byte buffer as an archive.

        Raises:
            ArchiveDecodeError: If the bytes are not a readable archive
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zlib.error, EOFError, ValueError) as e:
            raise ArchiveDecodeError(f"Cannot open archive: {e}") from e

        entries = [
            ArchiveEntry(name=info.filename, kind=self.classify(info), size=info.file_size)
            for info in archive.infolist()
        ]
        return ArchiveNode(archive=archive, entries=entries, depth=depth)

    async def descend(self, node: ArchiveNode) -> ArchiveNode:
        """Follow nested archives until a node without any is reached.

        Returns ``node`` itself when it holds no nested archive. Every archive
        descended past is closed; the returned node stays open for the caller.

        Raises:
            ArchiveDecodeError: If a nested archive cannot be decoded or the
                nesting is deeper than ``max_depth``
        """
        nested = node.nested_archives
        if not nested:
            return node

        if node.depth >= self._max_depth:
            node.close()
            raise ArchiveDecodeError(f"Archive nesting exceeds {self._max_depth} levels")

        target = nested[0]
        if len(nested) > 1:
            logger.warning(
                f"Found {len(nested)} nested archives, following only '{target.name}'"
            )
        logger.debug(f"Descending into nested archive '{target.name}' (depth {node.depth + 1})")

        try:
            data = await asyncio.to_thread(node.read, target.name)
        except ZIP_READ_ERRORS as e:
            raise ArchiveDecodeError(f"Cannot read nested archive '{target.name}': {e}") from e
        finally:
            # nothing else is read from an archive once it has been descended past
            node.close()

        return await self.descend(self.open(data, depth=node.depth + 1))
