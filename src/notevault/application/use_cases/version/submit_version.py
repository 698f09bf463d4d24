"""Submit a new version of a live document."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from notevault.application.dto.document_dto import Actor, VersionSubmitInput
from notevault.application.dto.stamp_options import provenance_text
from notevault.application.dto.watermark_jobs import ProvenanceStampJob
from notevault.application.ports import JobQueue, ObjectStore, Watermarker
from notevault.application.use_cases.uploads import release_blob, validate_pdf_upload
from notevault.domain.entities import DocumentVersion
from notevault.domain.exceptions import (
    Forbidden,
    InvalidState,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from notevault.domain.value_objects import (
    ApprovalStatus,
    ContentHash,
    FileReference,
    VersionStatus,
)

logger = logging.getLogger(__name__)


class SubmitVersionUseCase:
    """Store a candidate file for an approved document and queue its provenance stamp.

    The candidate is stamped before it can be promoted, so the live file is
    never touched by the worker once it is being served.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        object_store: ObjectStore,
        job_queue: JobQueue,
        watermarker: Watermarker,
        *,
        max_upload_bytes: int,
        brand_name: str,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._object_store = object_store
        self._job_queue = job_queue
        self._watermarker = watermarker
        self._max_upload_bytes = max_upload_bytes
        self._brand_name = brand_name

    async def execute(self, uploader: Actor, input_data: VersionSubmitInput) -> DocumentVersion:
        title = input_data.new_title.strip()
        if not title:
            raise ValidationError("New title is required")

        async with self._uow_factory() as uow:
            document = await uow.documents.get_by_id(input_data.document_id)
        if document is None:
            raise NotFound(f"Document {input_data.document_id} not found")
        if document.owner_id != uploader.user_id:
            raise Forbidden("Only the owner can submit a new version")
        if document.approval_status is not ApprovalStatus.APPROVED:
            raise InvalidState("Parent document must be approved before adding versions")

        validate_pdf_upload(
            input_data.data,
            input_data.filename,
            input_data.content_type,
            self._max_upload_bytes,
            self._watermarker,
        )
        content_hash = ContentHash.of(input_data.data)

        stored = await self._object_store.put(
            input_data.data,
            owner_id=uploader.user_id,
            filename=input_data.filename,
        )

        try:
            async with self._uow_factory() as uow:
                parent = await uow.documents.get_by_id(input_data.document_id)
                if parent is None:
                    raise NotFound(f"Document {input_data.document_id} not found")
                current_live = await uow.versions.get_current_live(parent.id)
                version = DocumentVersion(
                    id=uuid4(),
                    document_id=parent.id,
                    uploader_id=uploader.user_id,
                    title=title,
                    file=FileReference(url=stored.url, storage_handle=stored.handle),
                    content_hash=str(content_hash),
                    status=VersionStatus.PENDING,
                    uploaded_at=datetime.now(UTC),
                    previous_version_id=current_live.id if current_live else None,
                )
                await uow.versions.create(version)
        except BaseException:
            await release_blob(self._object_store, stored.handle)
            raise

        job = ProvenanceStampJob(
            storage_handle=stored.handle,
            document_id=version.document_id,
            version_id=version.id,
            stamp_text=provenance_text(uploader.username, self._brand_name),
        )
        try:
            await self._job_queue.enqueue(job)
        except Exception as e:
            logger.error("Could not queue provenance stamp for version %s; rolling back", version.id)
            async with self._uow_factory() as uow:
                await uow.versions.delete(version.id)
            await release_blob(self._object_store, stored.handle)
            raise StorageUnavailable("Could not queue version for processing") from e

        logger.info(
            "Version %s submitted for document %s (previous=%s)",
            version.id,
            version.document_id,
            version.previous_version_id,
        )
        return version
