"""PostgreSQL favorite repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from notevault.domain.entities import Favorite


class PostgresFavoriteRepository:
    """Favorite repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def add(self, favorite: Favorite) -> None:
        await self._conn.execute(
            "INSERT INTO favorite (user_id, document_id, created_at) VALUES (%s, %s, %s) "
            "ON CONFLICT (user_id, document_id) DO NOTHING",
            (favorite.user_id, favorite.document_id, favorite.created_at),
        )

    async def remove(self, user_id: str, document_id: UUID) -> None:
        await self._conn.execute(
            "DELETE FROM favorite WHERE user_id = %s AND document_id = %s",
            (user_id, document_id),
        )

    async def is_favorite(self, user_id: str, document_id: UUID) -> bool:
        cur = await self._conn.execute(
            "SELECT 1 FROM favorite WHERE user_id = %s AND document_id = %s",
            (user_id, document_id),
        )
        return await cur.fetchone() is not None

    async def list_user_ids(self, document_id: UUID) -> list[str]:
        cur = await self._conn.execute(
            "SELECT user_id FROM favorite WHERE document_id = %s ORDER BY created_at",
            (document_id,),
        )
        rows = await cur.fetchall()
        return [r[0] for r in rows]
