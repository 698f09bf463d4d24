"""Notifier port - tells favoriting users about approved or updated notes."""

from typing import Protocol
from uuid import UUID

from notevault.domain.entities import NotificationKind


class DocumentNotifier(Protocol):
    async def notify_favorites(
        self, document_id: UUID, document_title: str, kind: NotificationKind
    ) -> int: ...
