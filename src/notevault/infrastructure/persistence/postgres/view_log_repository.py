"""PostgreSQL view log repository implementation."""

from psycopg import AsyncConnection

from notevault.domain.entities import ViewLogEntry


class PostgresViewLogRepository:
    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def record(self, entry: ViewLogEntry) -> None:
        await self._conn.execute(
            "INSERT INTO view_log (id, viewer_id, document_id, viewed_at) VALUES (%s, %s, %s, %s)",
            (entry.id, entry.viewer_id, entry.document_id, entry.viewed_at),
        )
