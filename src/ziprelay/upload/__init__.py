"""
Batching and delivery to the destination object store.
"""

from .batcher import BatchAssembler, create_batches, join_key, new_batch_prefix
from .store import ObjectStore, S3ObjectStore, create_s3_client
from .uploader import BatchUploader, content_md5

__all__ = [
    "BatchAssembler",
    "create_batches",
    "join_key",
    "new_batch_prefix",
    "ObjectStore",
    "S3ObjectStore",
    "create_s3_client",
    "BatchUploader",
    "content_md5",
]
