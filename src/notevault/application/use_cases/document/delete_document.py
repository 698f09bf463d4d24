"""Delete document use case."""

import logging
from uuid import UUID

from notevault.application.dto.document_dto import Actor
from notevault.application.ports import ObjectStore
from notevault.application.use_cases.uploads import release_blob
from notevault.domain.exceptions import Forbidden, NotFound

logger = logging.getLogger(__name__)


class DeleteDocumentUseCase:
    """Delete a document with all its versions, then release their blobs."""

    def __init__(self, unit_of_work_factory: type, object_store: ObjectStore) -> None:
        self._uow_factory = unit_of_work_factory
        self._object_store = object_store

    async def execute(self, actor: Actor, document_id: UUID) -> None:
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id, for_update=True)
            if not document:
                raise NotFound(f"Document {document_id} not found")
            if not actor.is_admin and document.owner_id != actor.user_id:
                raise Forbidden("Unauthorized to delete this document")
            handles = {document.file.storage_handle}
            handles.update(await uow.versions.list_storage_handles(document_id))
            await uow.documents.delete(document_id)

        # Blobs go only after the rows are gone, so nothing can point at a released handle.
        for handle in sorted(handles):
            await release_blob(self._object_store, handle)
        logger.info("Document %s deleted by %s (%d blobs)", document_id, actor.user_id, len(handles))
