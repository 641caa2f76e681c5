"""
Destination object store access.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol

import boto3
from botocore.config import Config as BotoConfig

from ..models.config_models import DestinationConfig

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Anything that can store one object and return its ETag."""

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        content_md5: str,
    ) -> Optional[str]: ...


def create_s3_client(config: DestinationConfig) -> Any:
    """Build the boto3 S3 client shared by every batch in this process."""
    client_config = BotoConfig(
        retries={"max_attempts": config.max_attempts, "mode": "standard"},
        s3={"addressing_style": "path"} if config.endpoint_url else None,
    )

    kwargs: dict = {"config": client_config}
    if config.region:
        kwargs["region_name"] = config.region
    if config.endpoint_url:
        kwargs["endpoint_url"] = config.endpoint_url

    logger.debug(
        f"Creating S3 client (region={config.region}, endpoint={config.endpoint_url})"
    )
    return boto3.client("s3", **kwargs)


class S3ObjectStore:
    """ObjectStore backed by a boto3 S3 client."""

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_config(cls, config: DestinationConfig) -> "S3ObjectStore":
        return cls(create_s3_client(config))

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        content_md5: str,
    ) -> Optional[str]:
        # boto3 is blocking, keep it off the event loop
        response = await asyncio.get_running_loop().run_in_executor(
            None,
            lambda: self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                ContentMD5=content_md5,
            ),
        )
        return response.get("ETag")
