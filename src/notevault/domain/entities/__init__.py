"""Domain entities."""

from notevault.domain.entities.document import Document
from notevault.domain.entities.document_version import DocumentVersion
from notevault.domain.entities.favorite import Favorite
from notevault.domain.entities.notification import Notification, NotificationKind
from notevault.domain.entities.view_log import ViewLogEntry

__all__ = [
    "Document",
    "DocumentVersion",
    "Favorite",
    "Notification",
    "NotificationKind",
    "ViewLogEntry",
]
