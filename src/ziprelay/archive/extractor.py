"""
Streaming zip extraction with resource limits.

Entries are read one at a time so that at most one decompressed entry is held
by the extractor. The archive handle is owned by ``ArchiveExtractor`` and is
released when its ``async with`` block exits, whether the consumer finished,
stopped early, or an error was raised.
"""

import asyncio
import logging
import lzma
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional

from ..models.config_models import (
    DEFAULT_MAX_ENTRIES,
    DEFAULT_MAX_ENTRY_SIZE,
    DEFAULT_MAX_TOTAL_SIZE,
    ProcessingConfig,
)
from ..models.errors import ExtractionError
from ..models.processing_models import ExtractedItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionLimits:
    """Resource limits applied while extracting one archive."""

    max_entries: int = DEFAULT_MAX_ENTRIES
    max_entry_size: int = DEFAULT_MAX_ENTRY_SIZE
    max_total_size: int = DEFAULT_MAX_TOTAL_SIZE

    def __post_init__(self) -> None:
        if self.max_entries <= 0 or self.max_entry_size <= 0 or self.max_total_size <= 0:
            raise ValueError("Extraction limits must be positive")

    @classmethod
    def from_config(cls, config: ProcessingConfig) -> "ExtractionLimits":
        return cls(
            max_entries=config.max_entries,
            max_entry_size=config.max_entry_size,
            max_total_size=config.max_total_size,
        )


class ArchiveExtractor:
    """
    Forward-only reader over the files of one zip archive.

    Usage::

        async with ArchiveExtractor(path, limits) as entries:
            async for item in entries:
                ...

    Directory entries are skipped. Iteration raises ``ExtractionError`` as
    soon as a limit is crossed; items already yielded stay yielded.
    """

    def __init__(self, archive_path: Path, limits: Optional[ExtractionLimits] = None):
        self.archive_path = Path(archive_path)
        self.limits = limits or ExtractionLimits()
        self.entries_read = 0
        self.bytes_read = 0
        self._zip: Optional[zipfile.ZipFile] = None
        self._iterator: Optional[Any] = None
        self._started = False

    async def __aenter__(self) -> "ArchiveExtractor":
        loop = asyncio.get_running_loop()
        try:
            self._zip = await loop.run_in_executor(None, self._open)
        except (zipfile.BadZipFile, OSError, ValueError, EOFError) as e:
            raise ExtractionError.corrupt(str(self.archive_path), e) from e

        logger.debug(
            f"Opened {self.archive_path} ({len(self._zip.infolist())} entries)"
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._iterator is not None:
            await self._iterator.aclose()
            self._iterator = None

        if self._zip is not None:
            try:
                self._zip.close()
            finally:
                self._zip = None
            logger.debug(
                f"Closed {self.archive_path} after {self.entries_read} entries, "
                f"{self.bytes_read} bytes"
            )

    def __aiter__(self) -> AsyncIterator[ExtractedItem]:
        if self._zip is None:
            raise RuntimeError("ArchiveExtractor must be entered before iterating")
        if self._started:
            raise RuntimeError("ArchiveExtractor can only be iterated once")
        self._started = True
        self._iterator = self._iterate()
        return self._iterator

    def _open(self) -> zipfile.ZipFile:
        return zipfile.ZipFile(self.archive_path, "r")

    async def _iterate(self) -> AsyncIterator[ExtractedItem]:
        assert self._zip is not None
        loop = asyncio.get_running_loop()
        archive = str(self.archive_path)
        limits = self.limits

        for info in self._zip.infolist():
            if info.is_dir():
                continue

            self.entries_read += 1
            if self.entries_read > limits.max_entries:
                raise ExtractionError.too_many_entries(archive, limits.max_entries)

            # Declared sizes can lie, so these are re-checked against bytes read
            if info.file_size > limits.max_entry_size:
                raise ExtractionError.entry_too_large(
                    archive, info.filename, limits.max_entry_size
                )
            if self.bytes_read + info.file_size > limits.max_total_size:
                raise ExtractionError.too_large(archive, limits.max_total_size)

            content = await loop.run_in_executor(None, self._read_entry, info)

            if len(content) > limits.max_entry_size:
                raise ExtractionError.entry_too_large(
                    archive, info.filename, limits.max_entry_size
                )
            self.bytes_read += len(content)
            if self.bytes_read > limits.max_total_size:
                raise ExtractionError.too_large(archive, limits.max_total_size)

            yield ExtractedItem(name=info.filename, content=content)

    def _read_entry(self, info: zipfile.ZipInfo) -> bytes:
        assert self._zip is not None
        try:
            with self._zip.open(info) as handle:
                # One byte past the limit is enough to detect an oversized entry
                return handle.read(self.limits.max_entry_size + 1)
        except (
            zipfile.BadZipFile,
            zlib.error,
            lzma.LZMAError,
            OSError,
            EOFError,
            NotImplementedError,
            RuntimeError,
        ) as e:
            raise ExtractionError.read_failed(
                str(self.archive_path), entry_name=info.filename, cause=e
            ) from e


async def extract_archive(
    archive_path: Path, limits: Optional[ExtractionLimits] = None
) -> List[ExtractedItem]:
    """Extract every file of an archive into memory, honouring the limits."""
    async with ArchiveExtractor(archive_path, limits) as entries:
        return [item async for item in entries]
