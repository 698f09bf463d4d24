"""Read-only document use cases."""

from datetime import UTC, datetime
from uuid import UUID

from notevault.application.dto.document_dto import Actor
from notevault.domain.entities import Document, DocumentVersion
from notevault.domain.exceptions import Forbidden, NotFound


class GetDocumentUseCase:
    """Owner and admins always see the record; everyone else only once it is servable."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, actor: Actor, document_id: UUID) -> Document:
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id)
        if document is None:
            raise NotFound(f"Document {document_id} not found")
        if actor.is_admin or document.owner_id == actor.user_id:
            return document
        if not document.is_servable(datetime.now(UTC)):
            raise NotFound(f"Document {document_id} not found")
        return document


class ListPendingDocumentsUseCase:
    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, actor: Actor, limit: int = 50) -> list[Document]:
        if not actor.is_admin:
            raise Forbidden("Only admins can list pending documents")
        async with self._uow_factory() as uow:
            return await uow.documents.list_pending(limit=limit)


class ListVersionsUseCase:
    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, actor: Actor, document_id: UUID) -> list[DocumentVersion]:
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id)
            if document is None:
                raise NotFound(f"Document {document_id} not found")
            if not actor.is_admin and document.owner_id != actor.user_id:
                raise Forbidden("Unauthorized to list versions of this document")
            return await uow.versions.list_by_document(document_id)
