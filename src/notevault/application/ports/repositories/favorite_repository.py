"""Favorite repository port."""

from typing import Protocol
from uuid import UUID

from notevault.domain.entities import Favorite


class FavoriteRepository(Protocol):
    """Port for favorites (user <-> document bookmarks)."""

    async def add(self, favorite: Favorite) -> None: ...

    async def remove(self, user_id: str, document_id: UUID) -> None: ...

    async def is_favorite(self, user_id: str, document_id: UUID) -> bool: ...

    async def list_user_ids(self, document_id: UUID) -> list[str]: ...
