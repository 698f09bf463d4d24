"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from notevault.infrastructure.persistence.postgres.document_repository import (
    PostgresDocumentRepository,
)
from notevault.infrastructure.persistence.postgres.document_version_repository import (
    PostgresDocumentVersionRepository,
)
from notevault.infrastructure.persistence.postgres.favorite_repository import (
    PostgresFavoriteRepository,
)
from notevault.infrastructure.persistence.postgres.notification_repository import (
    PostgresNotificationRepository,
)
from notevault.infrastructure.persistence.postgres.view_log_repository import (
    PostgresViewLogRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._documents = PostgresDocumentRepository(self._conn)
        self._versions = PostgresDocumentVersionRepository(self._conn)
        self._favorites = PostgresFavoriteRepository(self._conn)
        self._view_logs = PostgresViewLogRepository(self._conn)
        self._notifications = PostgresNotificationRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def documents(self) -> PostgresDocumentRepository:
        return self._documents

    @property
    def versions(self) -> PostgresDocumentVersionRepository:
        return self._versions

    @property
    def favorites(self) -> PostgresFavoriteRepository:
        return self._favorites

    @property
    def view_logs(self) -> PostgresViewLogRepository:
        return self._view_logs

    @property
    def notifications(self) -> PostgresNotificationRepository:
        return self._notifications

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager)."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        uow = PostgresUnitOfWork(pool)
        async with uow:
            try:
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    return factory
