"""Filesystem object store for development and single-node deployments."""

import asyncio
import hashlib
import logging
import os
import tempfile
from pathlib import Path

from notevault.application.ports import StoredObject
from notevault.domain.exceptions import NotFound, StorageUnavailable
from notevault.infrastructure.storage.keys import build_object_key

logger = logging.getLogger(__name__)


class LocalObjectStore:
    """Blobs under a root directory; the handle is the path relative to the root."""

    def __init__(
        self,
        root: str | Path,
        *,
        key_prefix: str = "notes",
        public_base_url: str = "/files",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._root = Path(root).resolve()
        self._key_prefix = key_prefix
        self._public_base_url = public_base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, handle: str) -> Path:
        path = (self._root / handle).resolve()
        if not path.is_relative_to(self._root):
            raise NotFound(f"Object {handle} not found")
        return path

    async def put(
        self,
        data: bytes,
        *,
        owner_id: str,
        filename: str,
        content_type: str = "application/pdf",
    ) -> StoredObject:
        key = build_object_key(self._key_prefix, owner_id, filename)
        await self._run(self._write, self._path(key), data)
        logger.info("Stored object %s (%d bytes)", key, len(data))
        return StoredObject(
            handle=key,
            url=f"{self._public_base_url}/{key}",
            sha256=hashlib.sha256(data).hexdigest(),
            size_bytes=len(data),
        )

    async def get(self, handle: str) -> bytes:
        path = self._path(handle)
        try:
            return await self._run(path.read_bytes)
        except FileNotFoundError as e:
            raise NotFound(f"Object {handle} not found") from e

    async def overwrite(self, handle: str, data: bytes) -> None:
        path = self._path(handle)
        if not path.exists():
            raise NotFound(f"Object {handle} not found")
        try:
            await self._run(self._write, path, data)
        except FileNotFoundError as e:
            raise NotFound(f"Object {handle} not found") from e

    async def delete(self, handle: str) -> None:
        path = self._path(handle)
        try:
            await self._run(path.unlink)
        except FileNotFoundError as e:
            raise NotFound(f"Object {handle} not found") from e
        logger.info("Deleted object %s", handle)

    async def ping(self) -> bool:
        return self._root.is_dir()

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        """Write to a private temp file and rename so readers never see a partial file.

        Each writer gets its own temp file, so concurrent overwrites of one
        handle end with one complete copy.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(data)
        try:
            os.replace(tmp.name, path)
        except OSError:
            Path(tmp.name).unlink(missing_ok=True)
            raise

    async def _run(self, fn, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)
        except TimeoutError as e:
            raise StorageUnavailable(f"Local storage call timed out after {self._timeout}s") from e
        except FileNotFoundError:
            raise
        except OSError as e:
            raise StorageUnavailable(f"Local storage failure: {e}") from e
