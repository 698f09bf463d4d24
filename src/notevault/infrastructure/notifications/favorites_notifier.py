"""Store notification records for users who favorited a document."""

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

from notevault.domain.entities import Notification, NotificationKind

logger = logging.getLogger(__name__)


class FavoritesNotifier:
    """Writes one notification linked to every favoriting user.

    Delivery (email, push) is someone else's job; this only records the
    notification in its own transaction.
    """

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def notify_favorites(
        self, document_id: UUID, document_title: str, kind: NotificationKind
    ) -> int:
        async with self._uow_factory() as uow:
            user_ids = await uow.favorites.list_user_ids(document_id)
            if not user_ids:
                return 0
            notification = Notification.for_document(
                uuid4(), document_id, document_title, kind, datetime.now(UTC)
            )
            await uow.notifications.create(notification, user_ids)
        logger.info(
            "Notified %d user(s) about %s of document %s", len(user_ids), kind, document_id
        )
        return len(user_ids)
