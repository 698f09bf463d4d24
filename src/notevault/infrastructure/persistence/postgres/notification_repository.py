"""PostgreSQL notification repository implementation."""

from psycopg import AsyncConnection

from notevault.domain.entities import Notification


class PostgresNotificationRepository:
    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def create(self, notification: Notification, user_ids: list[str]) -> None:
        """Insert the notification and link it to each recipient."""
        await self._conn.execute(
            "INSERT INTO notification (id, document_id, kind, title, message, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s)",
            (
                notification.id,
                notification.document_id,
                notification.kind.value,
                notification.title,
                notification.message,
                notification.created_at,
            ),
        )
        if not user_ids:
            return
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO user_notification (user_id, notification_id, is_read) "
                "VALUES (%s, %s, FALSE) ON CONFLICT DO NOTHING",
                [(user_id, notification.id) for user_id in user_ids],
            )
