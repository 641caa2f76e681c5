"""
Unit tests for batch assembly and key layout.
"""

import math
import uuid

import pytest

from ziprelay.models.processing_models import OutputItem
from ziprelay.upload.batcher import BatchAssembler, create_batches, join_key, new_batch_prefix


def items(count):
    return [OutputItem(name=f"f{i}.xml", content=b"x") for i in range(count)]


class TestKeyLayout:
    """Test prefix and key joining."""

    def test_join_key_drops_empty_parts(self):
        assert join_key("", "uuid", "a.xml") == "uuid/a.xml"
        assert join_key("base/", "/uuid/", "a.xml") == "base/uuid/a.xml"

    def test_new_batch_prefix_uses_uuid(self):
        """Prefixes are the base joined with a fresh UUID."""
        prefix = new_batch_prefix("landing")
        base, token = prefix.split("/")

        assert base == "landing"
        assert str(uuid.UUID(token)) == token

    def test_prefixes_are_unique(self):
        prefixes = {new_batch_prefix("landing") for _ in range(200)}
        assert len(prefixes) == 200


class TestBatchAssembler:
    """Test streaming batch sealing."""

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            BatchAssembler("landing", 0)

    def test_seals_when_full(self):
        """add returns a batch exactly when capacity is reached."""
        assembler = BatchAssembler("landing", 2)
        first, second, third = items(3)

        assert assembler.add(first) is None
        batch = assembler.add(second)
        assert batch is not None
        assert len(batch) == 2
        assert assembler.add(third) is None
        assert assembler.pending_count == 1

    def test_flush_seals_remainder(self):
        """flush returns a short final batch, then nothing."""
        assembler = BatchAssembler("landing", 5)
        for item in items(3):
            assembler.add(item)

        final = assembler.flush()
        assert len(final) == 3
        assert assembler.flush() is None

    def test_each_batch_has_fresh_prefix(self):
        batches = create_batches(items(6), "landing", 2)
        assert len({batch.prefix for batch in batches}) == 3

    @pytest.mark.parametrize("count,size", [(1, 100), (3, 100), (10, 5), (11, 5), (100, 7)])
    def test_batch_count_and_sizes(self, count, size):
        """N items in capacity B give ceil(N/B) batches, all but the last full."""
        batches = create_batches(items(count), "landing", size)

        assert len(batches) == math.ceil(count / size)
        assert all(len(batch) == size for batch in batches[:-1])
        assert len(batches[-1]) == (count % size or size)

    def test_order_is_preserved(self):
        batches = create_batches(items(5), "", 2)
        names = [item.name for batch in batches for item in batch.items]
        assert names == [f"f{i}.xml" for i in range(5)]

    def test_no_items_no_batches(self):
        assert create_batches([], "landing", 3) == []
