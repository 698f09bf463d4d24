"""Promote a version to be its document's live content."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from notevault.application.background import BackgroundTasks
from notevault.application.dto.document_dto import Actor, PromotionResult
from notevault.application.ports import DocumentNotifier, ObjectStore
from notevault.application.use_cases.uploads import release_blob
from notevault.domain.entities import NotificationKind
from notevault.domain.exceptions import Forbidden, NotFound

logger = logging.getLogger(__name__)


class PromoteVersionUseCase:
    """Atomically swap a document's live file for one of its versions.

    The parent document row is locked for the whole transaction, so two
    promotions of the same document run one after the other while promotions
    of different documents do not wait on each other.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        object_store: ObjectStore,
        notifier: DocumentNotifier,
        background: BackgroundTasks,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._object_store = object_store
        self._notifier = notifier
        self._background = background

    async def execute(self, actor: Actor, version_id: UUID) -> PromotionResult:
        if not actor.is_admin:
            raise Forbidden("Only admins can promote versions")

        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            version = await uow.versions.get_by_id(version_id)
            if version is None:
                raise NotFound(f"Version {version_id} not found")

            document = await uow.documents.get_by_id(version.document_id, for_update=True)
            if document is None:
                raise NotFound(f"Document {version.document_id} not found")
            # Re-read under the document lock; a concurrent promotion may have won.
            version = await uow.versions.get_by_id(version_id, for_update=True)
            if version is None:
                raise NotFound(f"Version {version_id} not found")

            promoted = version.promote()
            previous_handle = document.file.storage_handle

            await uow.versions.clear_current_live(document.id)
            await uow.versions.update(promoted)
            updated = document.with_live_version(promoted.title, promoted.file, now)
            await uow.documents.update(updated)
            version_handles = set(await uow.versions.list_storage_handles(document.id))

        logger.info(
            "Version %s promoted to live for document %s by %s",
            promoted.id,
            updated.id,
            actor.user_id,
        )

        # The initial upload has no version row of its own; once replaced nothing references it.
        if previous_handle not in version_handles:
            await release_blob(self._object_store, previous_handle)

        self._background.spawn(
            self._notifier.notify_favorites(updated.id, updated.title, NotificationKind.UPDATE),
            f"notify-update:{updated.id}",
        )
        return PromotionResult(document=updated, version=promoted)
