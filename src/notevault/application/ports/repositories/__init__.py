"""Repository ports."""

from notevault.application.ports.repositories.document_repository import (
    DocumentRepository,
)
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

__all__ = [
    "DocumentRepository",
    "DocumentVersionRepository",
    "FavoriteRepository",
    "NotificationRepository",
    "ViewLogRepository",
]
