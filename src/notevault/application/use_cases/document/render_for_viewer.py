"""Render a per-viewer copy of a live document."""

import asyncio
import logging
import re
from datetime import UTC, datetime
from uuid import UUID, uuid4

from notevault.application.background import BackgroundTasks
from notevault.application.dto.document_dto import Actor, RenderedDocument
from notevault.application.dto.stamp_options import StampIdentity, viewer_options
from notevault.application.ports import ObjectStore, Watermarker
from notevault.domain.entities import ViewLogEntry
from notevault.domain.exceptions import NotFound, StorageUnavailable

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\r\n]+')


def _download_name(title: str) -> str:
    name = _UNSAFE_FILENAME_CHARS.sub("_", title).strip() or "document"
    return f"{name}.pdf"


class RenderForViewerUseCase:
    """Fetch the live master and stamp it with the viewer's identity.

    The stamped copy is returned to the caller only; the master in object
    storage is never written by this path.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        object_store: ObjectStore,
        watermarker: Watermarker,
        background: BackgroundTasks,
        logo_bytes: bytes | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._object_store = object_store
        self._watermarker = watermarker
        self._background = background
        self._logo_bytes = logo_bytes

    async def execute(self, document_id: UUID, viewer: Actor) -> RenderedDocument:
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(document_id)
        if document is None or not document.is_servable(now):
            raise NotFound(f"Document {document_id} not found")
        live_file = document.live_file
        if live_file is None:
            raise NotFound(f"Document {document_id} has no live file")

        source = await self._fetch(live_file.storage_handle)

        identity = StampIdentity(
            viewer_id=viewer.user_id,
            owner_id=document.owner_id,
            is_elevated=viewer.is_admin,
        )
        options = viewer_options(viewer.username, self._logo_bytes)
        content = await asyncio.to_thread(self._watermarker.stamp, source, options, identity)

        self._background.spawn(
            self._record_view(document.id, viewer.user_id, now),
            f"record-view:{document.id}",
        )
        return RenderedDocument(
            content=content,
            content_type="application/pdf",
            filename=_download_name(document.title),
        )

    async def _fetch(self, handle: str) -> bytes:
        """Get the master bytes, retrying once on a transient failure."""
        try:
            return await self._fetch_once(handle)
        except StorageUnavailable:
            logger.warning("Fetch of %s failed, retrying once", handle)
            return await self._fetch_once(handle)

    async def _fetch_once(self, handle: str) -> bytes:
        try:
            return await self._object_store.get(handle)
        except NotFound as e:
            # A live row without its blob is a storage fault, not a missing document.
            raise StorageUnavailable(f"Live file {handle} is missing from storage") from e

    async def _record_view(self, document_id: UUID, viewer_id: str, viewed_at: datetime) -> None:
        async with self._uow_factory() as uow:
            await uow.documents.increment_view_count(document_id)
            await uow.view_logs.record(
                ViewLogEntry(
                    id=uuid4(),
                    viewer_id=viewer_id,
                    document_id=document_id,
                    viewed_at=viewed_at,
                )
            )
