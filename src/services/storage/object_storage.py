"""Object storage for rendered campaign images (S3-compatible buckets such as R2)."""

import asyncio
from typing import Any, Optional, Protocol

import boto3
from loguru import logger as log

from common import global_config


class ObjectStorage(Protocol):
    async def put(self, key: str, data: bytes, content_type: str) -> str: ...


class S3ObjectStorage:
    """Writes objects with boto3 and returns their public URL."""

    def __init__(
        self,
        bucket: str = global_config.object_storage.bucket,
        public_base_url: str = global_config.object_storage.public_base_url,
        client: Optional[Any] = None,
    ) -> None:
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=global_config.object_storage.endpoint_url,
                region_name=global_config.object_storage.region,
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        # boto3 is blocking
        await asyncio.to_thread(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
        log.debug(f"Stored {len(data)} bytes at {self.bucket}/{key}")
        return self.public_url(key)
