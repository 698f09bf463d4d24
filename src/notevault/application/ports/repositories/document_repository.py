"""Document repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from notevault.domain.entities import Document


class DocumentRepository(Protocol):
    """Port for document persistence."""

    async def get_by_id(self, document_id: UUID, for_update: bool = False) -> Document | None: ...

    async def list_pending(self, *, limit: int = 50) -> list[Document]: ...

    async def create(self, document: Document) -> Document: ...

    async def update(self, document: Document) -> Document: ...

    async def delete(self, document_id: UUID) -> None: ...

    async def increment_view_count(self, document_id: UUID) -> None: ...

    async def mark_processed(self, document_id: UUID, processed_at: datetime) -> bool: ...
