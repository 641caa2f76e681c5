"""
Grouping of output items into upload batches.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from ..models.processing_models import Batch, OutputItem

logger = logging.getLogger(__name__)


def join_key(*parts: str) -> str:
    """Join key segments with ``/``, dropping empty segments and stray slashes."""
    cleaned = (part.strip("/") for part in parts if part)
    return "/".join(part for part in cleaned if part)


def new_batch_prefix(prefix_base: str) -> str:
    return join_key(prefix_base, str(uuid.uuid4()))


class BatchAssembler:
    """
    Streams output items into fixed-capacity batches.

    ``add`` returns a sealed batch as soon as the pending group is full;
    ``flush`` seals whatever remains at end of stream. Every batch gets a
    fresh prefix under ``prefix_base``.
    """

    def __init__(self, prefix_base: str, batch_size: int):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.prefix_base = prefix_base
        self.batch_size = batch_size
        self.batches_sealed = 0
        self._pending: List[OutputItem] = []

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def add(self, item: OutputItem) -> Optional[Batch]:
        self._pending.append(item)
        if len(self._pending) >= self.batch_size:
            return self._seal()
        return None

    def flush(self) -> Optional[Batch]:
        if not self._pending:
            return None
        return self._seal()

    def _seal(self) -> Batch:
        batch = Batch(prefix=new_batch_prefix(self.prefix_base), items=tuple(self._pending))
        self._pending = []
        self.batches_sealed += 1
        logger.debug(f"Sealed batch {batch.prefix} with {len(batch)} items")
        return batch


def create_batches(
    items: Iterable[OutputItem], prefix_base: str, batch_size: int
) -> List[Batch]:
    """Split items into batches of ``batch_size`` (the last may be short)."""
    assembler = BatchAssembler(prefix_base, batch_size)
    batches = []
    for item in items:
        batch = assembler.add(item)
        if batch is not None:
            batches.append(batch)

    final = assembler.flush()
    if final is not None:
        batches.append(final)
    return batches
