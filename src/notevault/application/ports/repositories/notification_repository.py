"""Notification repository port."""

from typing import Protocol

from notevault.domain.entities import Notification


class NotificationRepository(Protocol):
    """Port for notification records."""

    async def create(self, notification: Notification, user_ids: list[str]) -> None: ...
