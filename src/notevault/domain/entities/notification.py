"""Notification entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class NotificationKind(StrEnum):
    """Why users are being notified about a document."""

    NEW = "new"
    UPDATE = "update"


@dataclass
class Notification:
    """Message addressed to every user who favorited a document."""

    id: UUID
    document_id: UUID
    kind: NotificationKind
    title: str
    message: str
    created_at: datetime

    @classmethod
    def for_document(
        cls, id: UUID, document_id: UUID, document_title: str, kind: NotificationKind, now: datetime
    ) -> "Notification":
        if kind is NotificationKind.NEW:
            title = f"Note Approved: {document_title}"
            message = f'The note "{document_title}" is now available!'
        else:
            title = f"Update Available: {document_title}"
            message = f'A new version of the note "{document_title}" is now available.'
        return cls(
            id=id,
            document_id=document_id,
            kind=kind,
            title=title,
            message=message,
            created_at=now,
        )
