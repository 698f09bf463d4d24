"""Review document use case."""

import logging
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from notevault.application.background import BackgroundTasks
from notevault.application.dto.document_dto import Actor
from notevault.application.ports import DocumentNotifier
from notevault.domain.entities import Document, NotificationKind
from notevault.domain.exceptions import Forbidden, NotFound
from notevault.domain.value_objects import ApprovalStatus

logger = logging.getLogger(__name__)


class ReviewAction(StrEnum):
    APPROVE = "approve"
    REJECT = "reject"


class ReviewDocumentUseCase:
    """Admin approves or rejects an uploaded document."""

    def __init__(
        self,
        unit_of_work_factory: type,
        notifier: DocumentNotifier,
        background: BackgroundTasks,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._notifier = notifier
        self._background = background

    async def execute(
        self,
        actor: Actor,
        document_id: UUID,
        action: ReviewAction,
        reason: str | None = None,
    ) -> Document:
        if not actor.is_admin:
            raise Forbidden("Only admins can review documents")

        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id, for_update=True)
            if not document:
                raise NotFound(f"Document {document_id} not found")
            if action is ReviewAction.APPROVE:
                updated = document.approve(now)
            else:
                updated = document.reject(reason or "", now)
            await uow.documents.update(updated)

        logger.info("Document %s %s by %s", document_id, updated.approval_status, actor.user_id)
        if updated.approval_status is ApprovalStatus.APPROVED:
            self._background.spawn(
                self._notifier.notify_favorites(updated.id, updated.title, NotificationKind.NEW),
                f"notify-approved:{updated.id}",
            )
        return updated
