"""
Drives one archive from extraction to its terminal disposition.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..archive.extractor import ArchiveExtractor, ExtractionLimits
from ..content.classifier import ContentClassifier
from ..content.naming import NameDeduplicator
from ..models.config_models import RelayConfig
from ..models.errors import ExtractionError, RelayError, RoutingError, UploadError
from ..models.processing_models import ArchiveResult, Batch, OutputItem
from ..routing.file_router import FileRouter
from ..upload.batcher import BatchAssembler
from ..upload.store import ObjectStore
from ..upload.uploader import BatchUploader

logger = logging.getLogger(__name__)


class ArchiveState(Enum):
    """Processing state of one archive attempt."""

    IDLE = "idle"
    EXTRACTING = "extracting"
    CLASSIFYING = "classifying"
    FILTERING = "filtering"
    QUEUING = "queuing"
    UPLOADING = "uploading"
    FLUSHING = "flushing_final_batch"
    DECIDING = "deciding"
    ROUTING = "routing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ArchiveTask:
    """Counters and state for one attempt at one archive."""

    path: Path
    state: ArchiveState = ArchiveState.IDLE
    files_extracted: int = 0
    files_filtered: int = 0
    files_uploaded: int = 0
    files_failed: int = 0
    batches_uploaded: int = 0
    error: Optional[RelayError] = None
    history: List[ArchiveState] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)

    def transition(self, state: ArchiveState) -> None:
        self.history.append(self.state)
        self.state = state
        logger.debug(f"{self.path.name}: {self.history[-1].value} -> {state.value}")


class ArchiveProcessor:
    """
    Extracts, classifies, batches and uploads the files of one archive.

    Extraction and upload failures are returned as data in the
    ``ArchiveResult``; they never propagate out of ``process``. Uploads that
    succeeded before a failure are not rolled back.
    """

    def __init__(
        self,
        classifier: ContentClassifier,
        uploader: BatchUploader,
        router: FileRouter,
        prefix_base: str = "",
        batch_size: int = 100,
        limits: Optional[ExtractionLimits] = None,
    ):
        self.classifier = classifier
        self.uploader = uploader
        self.router = router
        self.prefix_base = prefix_base
        self.batch_size = batch_size
        self.limits = limits or ExtractionLimits()

    @classmethod
    def from_config(
        cls,
        config: RelayConfig,
        store: ObjectStore,
        router: Optional[FileRouter] = None,
    ) -> "ArchiveProcessor":
        return cls(
            classifier=ContentClassifier(
                config.processing.filename_pattern, config.processing.filter_pattern
            ),
            uploader=BatchUploader.from_config(store, config.destination, config.processing),
            router=router or FileRouter.from_config(config.source),
            prefix_base=config.destination.prefix_base,
            batch_size=config.processing.batch_size,
            limits=ExtractionLimits.from_config(config.processing),
        )

    async def process(self, archive_path: Path) -> ArchiveResult:
        task = ArchiveTask(path=Path(archive_path))
        logger.info(f"Processing {task.path}")

        try:
            await self._extract_and_upload(task)
        except ExtractionError as e:
            logger.error(f"Extraction of {task.path} failed: {e}")
            task.error = e
        except Exception as e:
            # Anything else still ends in a Failure so the archive is routed
            logger.error(f"Processing {task.path} failed unexpectedly: {e}", exc_info=True)
            task.error = ExtractionError.read_failed(str(task.path), cause=e)

        result = self._decide(task)
        await self._route(task, result)

        task.transition(ArchiveState.SUCCEEDED if result.success else ArchiveState.FAILED)
        logger.info(
            f"{'Processed' if result.success else 'Failed'} {task.path}: "
            f"{task.files_extracted} extracted, {task.files_uploaded} uploaded, "
            f"{task.files_filtered} filtered, {task.files_failed} failed "
            f"in {time.time() - task.started_at:.2f}s"
        )
        return result

    async def _extract_and_upload(self, task: ArchiveTask) -> None:
        # Scoped to this attempt only
        deduplicator = NameDeduplicator()
        assembler = BatchAssembler(self.prefix_base, self.batch_size)

        task.transition(ArchiveState.EXTRACTING)
        async with ArchiveExtractor(task.path, self.limits) as entries:
            async for item in entries:
                task.files_extracted += 1

                task.transition(ArchiveState.CLASSIFYING)
                classified = self.classifier.classify(item)
                if not classified.keep:
                    task.transition(ArchiveState.FILTERING)
                    task.files_filtered += 1
                    task.transition(ArchiveState.EXTRACTING)
                    continue

                task.transition(ArchiveState.QUEUING)
                output = OutputItem(
                    name=deduplicator.resolve(classified.name), content=item.content
                )
                batch = assembler.add(output)
                if batch is not None:
                    await self._upload(task, batch)

                task.transition(ArchiveState.EXTRACTING)

        task.transition(ArchiveState.FLUSHING)
        final_batch = assembler.flush()
        if final_batch is not None:
            await self._upload(task, final_batch)

    async def _upload(self, task: ArchiveTask, batch: Batch) -> None:
        task.transition(ArchiveState.UPLOADING)
        result = await self.uploader.upload_batch(batch)
        task.files_uploaded += len(result.successful)
        task.files_failed += len(result.failed)
        task.batches_uploaded += 1

    def _decide(self, task: ArchiveTask) -> ArchiveResult:
        task.transition(ArchiveState.DECIDING)

        error = task.error
        if error is None and task.files_failed > 0:
            error = UploadError.partial(
                self.uploader.bucket,
                task.files_failed,
                task.files_failed + task.files_uploaded,
            )
        elif error is None and task.files_uploaded == 0:
            error = ExtractionError.empty(str(task.path))

        return ArchiveResult(
            archive_path=task.path,
            success=error is None,
            files_extracted=task.files_extracted,
            files_uploaded=task.files_uploaded,
            files_filtered=task.files_filtered,
            files_failed=task.files_failed,
            error=error,
        )

    async def _route(self, task: ArchiveTask, result: ArchiveResult) -> None:
        task.transition(ArchiveState.ROUTING)
        try:
            await self.router.route(task.path, result.success)
        except RoutingError as e:
            # Disposition is already decided; routing is best effort
            logger.warning(f"Routing {task.path} failed: {e.full_message}")
            result.routing_error = e
