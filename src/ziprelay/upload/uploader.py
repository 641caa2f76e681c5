"""
Batch delivery to the destination object store.

Items of one batch are uploaded in waves of at most ``concurrency`` parallel
requests. A failing item never aborts the batch: its error is recorded and
the remaining items are still attempted.
"""

import asyncio
import base64
import hashlib
import logging
import time
from typing import Optional, Union

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ..models.config_models import DestinationConfig, ProcessingConfig
from ..models.errors import UploadError
from ..models.processing_models import Batch, BatchUploadResult, UploadSuccess
from .batcher import join_key
from .store import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_CONCURRENCY = 10


def content_md5(content: bytes) -> str:
    """Base64 MD5 digest, as expected by the Content-MD5 header."""
    return base64.b64encode(hashlib.md5(content).digest()).decode("ascii")


class BatchUploader:
    """Uploads batches with bounded concurrency and per-item retry."""

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        content_type: str = "application/xml",
        concurrency: int = DEFAULT_UPLOAD_CONCURRENCY,
        retry_attempts: int = 1,
        retry_wait_seconds: float = 0.0,
    ):
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        if retry_attempts <= 0:
            raise ValueError("retry_attempts must be positive")

        self.store = store
        self.bucket = bucket
        self.content_type = content_type
        self.concurrency = concurrency
        self.retry_attempts = retry_attempts
        self.retry_wait_seconds = retry_wait_seconds

    @classmethod
    def from_config(
        cls,
        store: ObjectStore,
        destination: DestinationConfig,
        processing: ProcessingConfig,
    ) -> "BatchUploader":
        return cls(
            store,
            bucket=destination.bucket,
            content_type=destination.content_type,
            concurrency=processing.upload_concurrency,
            retry_attempts=processing.upload_retry_attempts,
            retry_wait_seconds=processing.retry_wait_seconds,
        )

    async def upload_batch(self, batch: Batch) -> BatchUploadResult:
        """
        Upload every item of a batch under ``batch.prefix``.

        Args:
            batch: Sealed batch of output items

        Returns:
            BatchUploadResult listing successful keys and per-item errors

        Raises:
            ValueError: If the batch has no items or no prefix
        """
        if not batch.items:
            raise ValueError("Cannot upload an empty batch")
        if not batch.prefix:
            raise ValueError("Batch prefix must not be empty")

        start_time = time.time()
        result = BatchUploadResult(prefix=batch.prefix)

        for i in range(0, len(batch.items), self.concurrency):
            wave = batch.items[i : i + self.concurrency]
            outcomes = await asyncio.gather(
                *(
                    self._upload_item(join_key(batch.prefix, item.name), item.content)
                    for item in wave
                )
            )
            for outcome in outcomes:
                if isinstance(outcome, UploadError):
                    result.failed.append(outcome)
                else:
                    result.successful.append(outcome)

        for error in result.failed:
            logger.warning(f"File upload failed: {error.key}: {error.cause}")

        logger.info(
            f"Batch {batch.prefix}: {len(result.successful)} uploaded, "
            f"{len(result.failed)} failed in {time.time() - start_time:.2f}s"
        )
        return result

    async def _upload_item(self, key: str, content: bytes) -> Union[UploadSuccess, UploadError]:
        checksum = content_md5(content)
        try:
            etag = await self._put_with_retry(key, content, checksum)
        except Exception as e:
            return UploadError.put(self.bucket, key, e)
        return UploadSuccess(key=key, etag=etag)

    async def _put_with_retry(self, key: str, content: bytes, checksum: str) -> Optional[str]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait_seconds, max=30),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.debug(
                        f"Retrying upload of {key} "
                        f"(attempt {attempt.retry_state.attempt_number}/{self.retry_attempts})"
                    )
                return await self.store.put_object(
                    self.bucket, key, content, self.content_type, checksum
                )
        return None

