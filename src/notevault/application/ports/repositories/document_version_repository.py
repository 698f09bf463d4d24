"""Document version repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from notevault.domain.entities import DocumentVersion


class DocumentVersionRepository(Protocol):
    """Port for document version persistence."""

    async def get_by_id(self, version_id: UUID, for_update: bool = False) -> DocumentVersion | None: ...

    async def list_by_document(self, document_id: UUID) -> list[DocumentVersion]: ...

    async def get_current_live(self, document_id: UUID) -> DocumentVersion | None: ...

    async def clear_current_live(self, document_id: UUID) -> None: ...

    async def create(self, version: DocumentVersion) -> DocumentVersion: ...

    async def update(self, version: DocumentVersion) -> DocumentVersion: ...

    async def delete(self, version_id: UUID) -> None: ...

    async def mark_processed(self, version_id: UUID, processed_at: datetime) -> bool: ...

    async def list_storage_handles(self, document_id: UUID) -> list[str]: ...
