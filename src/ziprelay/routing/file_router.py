"""
Filesystem collaborators: archive discovery, age probing and routing.
"""

import asyncio
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Callable, List, TypeVar

from ..models.config_models import SourceConfig
from ..models.errors import ListingError, RoutingError, StatError
from ..models.processing_models import ArchiveListing

logger = logging.getLogger(__name__)

T = TypeVar("T")

ARCHIVE_SUFFIX = ".zip"


def is_valid_archive_name(filename: str) -> bool:
    """Zip files only, ignoring hidden files."""
    return filename.endswith(ARCHIVE_SUFFIX) and not filename.startswith(".")


async def _run_blocking(func: Callable[[], T]) -> T:
    return await asyncio.get_running_loop().run_in_executor(None, func)


async def file_age_ms(path: Path) -> float:
    """Milliseconds since the file was last modified."""
    try:
        stat_result = await _run_blocking(lambda: os.stat(path))
    except OSError as e:
        raise StatError.stat(str(path), e) from e
    return max(0.0, (time.time() - stat_result.st_mtime) * 1000)


async def list_archives(directory: Path, min_file_age_ms: int = 0) -> ArchiveListing:
    """
    List archives in ``directory`` that are ready for processing.

    Archives younger than ``min_file_age_ms`` are skipped because the
    producer may still be writing them. An archive whose age cannot be
    determined is included.

    Raises:
        ListingError: If the directory cannot be read
    """
    try:
        names = await _run_blocking(lambda: sorted(os.listdir(directory)))
    except OSError as e:
        raise ListingError.list_failed(str(directory), e) from e

    ready: List[str] = []
    skipped_too_new = 0
    oldest_age_ms = 0.0

    for name in filter(is_valid_archive_name, names):
        try:
            age = await file_age_ms(Path(directory) / name)
        except StatError as e:
            logger.debug(f"Including {name} despite stat failure: {e}")
            ready.append(name)
            continue

        oldest_age_ms = max(oldest_age_ms, age)
        if min_file_age_ms <= 0 or age >= min_file_age_ms:
            ready.append(name)
        else:
            skipped_too_new += 1

    logger.info(
        f"Found {len(ready)} archive(s) ready in {directory}"
        + (f", {skipped_too_new} too new" if skipped_too_new else "")
    )
    return ArchiveListing(
        files=ready, oldest_age_ms=oldest_age_ms, skipped_too_new=skipped_too_new
    )


class FileRouter:
    """Moves or deletes processed archives according to their disposition."""

    def __init__(self, archive_dir: Path, failed_dir: Path, delete_on_success: bool = False):
        self.archive_dir = Path(archive_dir)
        self.failed_dir = Path(failed_dir)
        self.delete_on_success = delete_on_success

    @classmethod
    def from_config(cls, config: SourceConfig) -> "FileRouter":
        return cls(config.archive_dir, config.failed_dir, config.delete_on_success)

    async def route(self, path: Path, success: bool) -> None:
        """
        Route a processed archive.

        Raises:
            RoutingError: If the move or delete fails
        """
        if success and self.delete_on_success:
            await self.delete_file(path)
        elif success:
            await self.move_file(path, self.archive_dir)
        else:
            await self.move_file(path, self.failed_dir)

    async def move_file(self, path: Path, destination_dir: Path) -> Path:
        destination = destination_dir / Path(path).name

        def _move() -> None:
            destination_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(path), str(destination))

        try:
            await _run_blocking(_move)
        except OSError as e:
            raise RoutingError.move(str(path), e) from e

        logger.debug(f"Moved {path} -> {destination}")
        return destination

    async def delete_file(self, path: Path) -> None:
        try:
            await _run_blocking(lambda: os.unlink(path))
        except OSError as e:
            raise RoutingError.delete(str(path), e) from e

        logger.debug(f"Deleted {path}")
