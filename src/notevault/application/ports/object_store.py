"""Object store port - binary PDF blobs."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    """Result of storing a blob."""

    handle: str
    url: str
    sha256: str
    size_bytes: int


class ObjectStore(Protocol):
    """Port for the remote blob store.

    Implementations raise NotFound for unknown handles and StorageUnavailable
    for timeouts and other transient failures.
    """

    async def put(
        self,
        data: bytes,
        *,
        owner_id: str,
        filename: str,
        content_type: str = "application/pdf",
    ) -> StoredObject: ...

    async def get(self, handle: str) -> bytes: ...

    async def overwrite(self, handle: str, data: bytes) -> None: ...

    async def delete(self, handle: str) -> None: ...
