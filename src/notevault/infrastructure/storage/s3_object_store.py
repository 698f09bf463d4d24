"""S3 object store - boto3 calls run in worker threads with bounded timeouts."""

import asyncio
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from notevault.application.ports import StoredObject
from notevault.domain.exceptions import NotFound, StorageUnavailable
from notevault.infrastructure.storage.keys import build_object_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3ObjectStore:
    """S3-compatible object store (AWS S3, MinIO).

    The storage handle is the object key. Missing keys raise NotFound; every
    other client, network or timeout failure raises StorageUnavailable.
    """

    def __init__(
        self,
        bucket_name: str,
        *,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str = "us-east-1",
        key_prefix: str = "notes",
        public_base_url: str | None = None,
        timeout_seconds: float = 10.0,
        client: Any | None = None,
    ) -> None:
        self._bucket = bucket_name
        self._key_prefix = key_prefix
        self._timeout = timeout_seconds
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(
                connect_timeout=timeout_seconds,
                read_timeout=timeout_seconds,
                retries={"max_attempts": 2, "mode": "standard"},
            ),
        )
        base = public_base_url or (
            f"{endpoint_url.rstrip('/')}/{bucket_name}" if endpoint_url else f"https://{bucket_name}.s3.{region}.amazonaws.com"
        )
        self._public_base_url = base.rstrip("/")

    async def put(
        self,
        data: bytes,
        *,
        owner_id: str,
        filename: str,
        content_type: str = "application/pdf",
    ) -> StoredObject:
        key = build_object_key(self._key_prefix, owner_id, filename)
        sha256 = hashlib.sha256(data).hexdigest()
        await self._call(
            "put",
            key,
            self._client.put_object,
            Bucket=self._bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            Metadata={"sha256": sha256, "owner_id": owner_id},
        )
        logger.info("Stored object %s (%d bytes)", key, len(data))
        return StoredObject(
            handle=key,
            url=f"{self._public_base_url}/{key}",
            sha256=sha256,
            size_bytes=len(data),
        )

    async def get(self, handle: str) -> bytes:
        response = await self._call(
            "get", handle, self._client.get_object, Bucket=self._bucket, Key=handle
        )
        body = response["Body"]
        try:
            return await asyncio.wait_for(asyncio.to_thread(body.read), timeout=self._timeout)
        except (TimeoutError, BotoCoreError) as e:
            raise StorageUnavailable(f"Reading {handle} failed: {e}") from e
        finally:
            body.close()

    async def overwrite(self, handle: str, data: bytes) -> None:
        await self._call("head", handle, self._client.head_object, Bucket=self._bucket, Key=handle)
        await self._call(
            "overwrite",
            handle,
            self._client.put_object,
            Bucket=self._bucket,
            Key=handle,
            Body=data,
            ContentType="application/pdf",
            Metadata={"sha256": hashlib.sha256(data).hexdigest()},
        )

    async def delete(self, handle: str) -> None:
        await self._call("delete", handle, self._client.delete_object, Bucket=self._bucket, Key=handle)
        logger.info("Deleted object %s", handle)

    async def ping(self) -> bool:
        try:
            await self._call("head_bucket", self._bucket, self._client.head_bucket, Bucket=self._bucket)
        except (NotFound, StorageUnavailable):
            logger.warning("Object store ping failed", exc_info=True)
            return False
        return True

    async def _call(self, op: str, key: str, fn: Callable[..., T], **kwargs: Any) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, **kwargs), timeout=self._timeout)
        except TimeoutError as e:
            raise StorageUnavailable(f"S3 {op} of {key} timed out after {self._timeout}s") from e
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code in _MISSING_CODES:
                raise NotFound(f"Object {key} not found") from e
            logger.error("S3 %s failed: key=%s error=%s", op, key, code)
            raise StorageUnavailable(f"S3 {op} of {key} failed: {code}") from e
        except BotoCoreError as e:
            logger.error("S3 %s failed: key=%s error=%s", op, key, e)
            raise StorageUnavailable(f"S3 {op} of {key} failed: {e}") from e
