"""Favorite / unfavorite a document."""

from datetime import UTC, datetime
from uuid import UUID

from notevault.application.dto.document_dto import Actor
from notevault.domain.entities import Favorite
from notevault.domain.exceptions import NotFound


class FavoriteDocumentUseCase:
    """Users who favorite a note get notified when it is approved or updated."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def add(self, actor: Actor, document_id: UUID) -> bool:
        """Returns False when the document was already a favorite."""
        async with self._uow_factory() as uow:
            if not await uow.documents.get_by_id(document_id):
                raise NotFound(f"Document {document_id} not found")
            if await uow.favorites.is_favorite(actor.user_id, document_id):
                return False
            await uow.favorites.add(
                Favorite(
                    user_id=actor.user_id,
                    document_id=document_id,
                    created_at=datetime.now(UTC),
                )
            )
        return True

    async def remove(self, actor: Actor, document_id: UUID) -> None:
        async with self._uow_factory() as uow:
            await uow.favorites.remove(actor.user_id, document_id)
