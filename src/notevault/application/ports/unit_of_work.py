"""Unit of Work port - transactional boundary."""

from collections.abc import AsyncIterator
from typing import Protocol

from notevault.application.ports.repositories.document_repository import DocumentRepository
from notevault.application.ports.repositories.document_version_repository import (
    DocumentVersionRepository,
)
from notevault.application.ports.repositories.favorite_repository import (
    FavoriteRepository,
)
from notevault.application.ports.repositories.notification_repository import (
    NotificationRepository,
)
from notevault.application.ports.repositories.view_log_repository import (
    ViewLogRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def documents(self) -> DocumentRepository: ...

    @property
    def versions(self) -> DocumentVersionRepository: ...

    @property
    def favorites(self) -> FavoriteRepository: ...

    @property
    def view_logs(self) -> ViewLogRepository: ...

    @property
    def notifications(self) -> NotificationRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
