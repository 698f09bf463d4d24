"""Unit tests for the object store adapters."""

import asyncio
import hashlib
import time

import boto3
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from moto import mock_aws

from notevault.domain.exceptions import NotFound, StorageUnavailable
from notevault.infrastructure.storage.keys import build_object_key, safe_stem
from notevault.infrastructure.storage.local_object_store import LocalObjectStore
from notevault.infrastructure.storage.s3_object_store import S3ObjectStore

TEST_BUCKET = "test-notevault-bucket"
TEST_REGION = "us-east-1"


class TestKeys:
    def test_safe_stem_strips_path_and_symbols(self) -> None:
        assert safe_stem("../../etc/Lecture 1 (final).PDF") == "Lecture_1_final"
        assert safe_stem("C:\\Users\\me\\notes.pdf") == "notes"
        assert safe_stem("???.pdf") == "document"

    def test_object_keys_are_unique(self) -> None:
        first = build_object_key("notes", "user-1", "a.pdf")
        second = build_object_key("notes", "user-1", "a.pdf")
        assert first != second
        assert first.startswith("notes/user-1_")
        assert first.endswith("_a.pdf")

    def test_empty_prefix(self) -> None:
        assert "/" not in build_object_key("", "user-1", "a.pdf")


class TestLocalObjectStore:
    @pytest.fixture
    def store(self, tmp_path) -> LocalObjectStore:
        return LocalObjectStore(tmp_path / "blobs", key_prefix="notes", public_base_url="/files/")

    @pytest.mark.asyncio
    async def test_put_get_overwrite_delete(self, store: LocalObjectStore) -> None:
        stored = await store.put(b"%PDF-1 original", owner_id="user-1", filename="calc.pdf")

        assert stored.url == f"/files/{stored.handle}"
        assert stored.sha256 == hashlib.sha256(b"%PDF-1 original").hexdigest()
        assert stored.size_bytes == 15
        assert await store.get(stored.handle) == b"%PDF-1 original"

        await store.overwrite(stored.handle, b"%PDF-1 stamped")
        assert await store.get(stored.handle) == b"%PDF-1 stamped"

        await store.delete(stored.handle)
        with pytest.raises(NotFound):
            await store.get(stored.handle)

    @pytest.mark.asyncio
    async def test_overwrite_missing_handle(self, store: LocalObjectStore) -> None:
        with pytest.raises(NotFound):
            await store.overwrite("notes/missing.pdf", b"data")

    @pytest.mark.asyncio
    async def test_delete_missing_handle(self, store: LocalObjectStore) -> None:
        with pytest.raises(NotFound):
            await store.delete("notes/missing.pdf")

    @pytest.mark.asyncio
    async def test_handle_cannot_escape_root(self, store: LocalObjectStore) -> None:
        with pytest.raises(NotFound):
            await store.get("../../etc/passwd")

    @pytest.mark.asyncio
    async def test_concurrent_overwrites_leave_one_complete_copy(
        self, store: LocalObjectStore, tmp_path
    ) -> None:
        stored = await store.put(b"%PDF-1 original", owner_id="user-1", filename="calc.pdf")
        first, second = b"%PDF-1 stamped by worker A", b"%PDF-1 stamped by worker B"

        for _ in range(30):
            await asyncio.gather(
                store.overwrite(stored.handle, first),
                store.overwrite(stored.handle, second),
            )
            assert await store.get(stored.handle) in (first, second)

        leftovers = [p.name for p in (tmp_path / "blobs").rglob("*") if p.name.endswith(".tmp")]
        assert leftovers == []

    @pytest.mark.asyncio
    async def test_ping(self, store: LocalObjectStore) -> None:
        assert await store.ping() is True


class _RaisingClient:
    """Minimal boto3 client stand-in that fails every call."""

    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self._error = error
        self._delay = delay

    def _fail(self, **kwargs):
        if self._delay:
            time.sleep(self._delay)
        if self._error:
            raise self._error
        return {}

    put_object = get_object = head_object = delete_object = head_bucket = _fail


class TestS3ObjectStore:
    @pytest.fixture
    def store(self):
        with mock_aws():
            client = boto3.client("s3", region_name=TEST_REGION)
            client.create_bucket(Bucket=TEST_BUCKET)
            yield S3ObjectStore(
                TEST_BUCKET,
                region=TEST_REGION,
                access_key="test-access-key",
                secret_key="test-secret-key",
                key_prefix="notes",
            )

    @pytest.mark.asyncio
    async def test_put_get_overwrite_delete(self, store: S3ObjectStore) -> None:
        stored = await store.put(b"%PDF-1 original", owner_id="user-1", filename="calc.pdf")

        assert stored.handle.startswith("notes/user-1_")
        assert stored.url == f"https://{TEST_BUCKET}.s3.{TEST_REGION}.amazonaws.com/{stored.handle}"
        assert await store.get(stored.handle) == b"%PDF-1 original"

        await store.overwrite(stored.handle, b"%PDF-1 stamped")
        assert await store.get(stored.handle) == b"%PDF-1 stamped"

        await store.delete(stored.handle)
        with pytest.raises(NotFound):
            await store.get(stored.handle)

    @pytest.mark.asyncio
    async def test_overwrite_never_creates(self, store: S3ObjectStore) -> None:
        with pytest.raises(NotFound):
            await store.overwrite("notes/missing.pdf", b"data")

    @pytest.mark.asyncio
    async def test_ping(self, store: S3ObjectStore) -> None:
        assert await store.ping() is True

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self) -> None:
        error = ClientError({"Error": {"Code": "SlowDown", "Message": "slow"}}, "PutObject")
        store = S3ObjectStore(TEST_BUCKET, client=_RaisingClient(error))
        with pytest.raises(StorageUnavailable, match="SlowDown"):
            await store.put(b"data", owner_id="user-1", filename="a.pdf")

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self) -> None:
        store = S3ObjectStore(
            TEST_BUCKET, client=_RaisingClient(EndpointConnectionError(endpoint_url="http://minio:9000"))
        )
        with pytest.raises(StorageUnavailable):
            await store.get("notes/a.pdf")
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self) -> None:
        store = S3ObjectStore(TEST_BUCKET, client=_RaisingClient(delay=0.5), timeout_seconds=0.05)
        with pytest.raises(StorageUnavailable, match="timed out"):
            await store.delete("notes/a.pdf")
