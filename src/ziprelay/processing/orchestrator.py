"""
One invocation: list ready archives and process them under a time budget.
"""

import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ..models.config_models import RelayConfig
from ..models.errors import ListingError
from ..models.processing_models import ArchiveListing, ArchiveResult, InvocationResult
from ..routing.file_router import list_archives
from ..upload.store import ObjectStore
from .archive_processor import ArchiveProcessor

logger = logging.getLogger(__name__)

RemainingTimeFn = Callable[[], float]
ListArchivesFn = Callable[[Path, int], Awaitable[ArchiveListing]]


class InvocationBudget:
    """Wall-clock budget for one invocation, measured on a monotonic clock."""

    def __init__(self, total_seconds: float, clock: Callable[[], float] = time.monotonic):
        if total_seconds <= 0:
            raise ValueError("total_seconds must be positive")
        self.total_seconds = total_seconds
        self._clock = clock
        self._started = clock()

    def remaining_ms(self) -> float:
        elapsed = self._clock() - self._started
        return max(0.0, (self.total_seconds - elapsed) * 1000)


class InvocationOrchestrator:
    """
    Processes ready archives strictly one at a time, in listing order.

    Before each archive the remaining time is compared to
    ``timeout_buffer_ms``; once it drops below the buffer the invocation
    stops and leaves the rest for the next run. An archive that has started
    always runs to completion.
    """

    def __init__(
        self,
        processor: ArchiveProcessor,
        source_dir: Path,
        timeout_buffer_ms: int,
        max_files_per_invocation: int,
        min_file_age_ms: int = 0,
        lister: ListArchivesFn = list_archives,
    ):
        self.processor = processor
        self.source_dir = Path(source_dir)
        self.timeout_buffer_ms = timeout_buffer_ms
        self.max_files_per_invocation = max_files_per_invocation
        self.min_file_age_ms = min_file_age_ms
        self.lister = lister

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        store: ObjectStore,
        processor: Optional[ArchiveProcessor] = None,
        lister: ListArchivesFn = list_archives,
    ) -> "InvocationOrchestrator":
        return cls(
            processor=processor or ArchiveProcessor.from_config(config, store),
            source_dir=config.source.source_dir,
            timeout_buffer_ms=config.processing.timeout_buffer_ms,
            max_files_per_invocation=config.source.max_files_per_invocation,
            min_file_age_ms=config.source.min_file_age_ms,
            lister=lister,
        )

    async def run(self, remaining_time_ms: RemainingTimeFn) -> InvocationResult:
        """
        Run one invocation.

        Args:
            remaining_time_ms: Returns the milliseconds left in this invocation

        Returns:
            InvocationResult covering every archive that was attempted
        """
        logger.info(f"Starting invocation for {self.source_dir}")

        try:
            listing = await self.lister(self.source_dir, self.min_file_age_ms)
        except ListingError as e:
            logger.error(f"Listing {self.source_dir} failed: {e.full_message}")
            result = InvocationResult()
            result.add(ArchiveResult(archive_path=self.source_dir, success=False, error=e))
            return result

        archives = listing.files[: self.max_files_per_invocation]
        result = InvocationResult(
            archives_skipped=len(listing.files) - len(archives),
            oldest_age_ms=listing.oldest_age_ms,
        )

        if result.archives_skipped:
            logger.info(
                f"Batch size limited: processing {len(archives)} of "
                f"{len(listing.files)} archives"
            )
        if not archives:
            logger.info("No archives to process")
            return result

        for index, name in enumerate(archives):
            remaining = remaining_time_ms()
            if remaining < self.timeout_buffer_ms:
                logger.warning(
                    f"Timeout approaching: {remaining:.0f}ms remaining, "
                    f"buffer {self.timeout_buffer_ms}ms; processed {index}, "
                    f"leaving {len(archives) - index} for next invocation"
                )
                result.stopped_early = True
                break

            result.add(await self.processor.process(self.source_dir / name))

        logger.info(
            f"Invocation finished: {result.zips_processed} processed, "
            f"{result.zips_failed} failed, {result.total_files_uploaded} files uploaded"
            + (" (stopped early)" if result.stopped_early else "")
        )
        return result
