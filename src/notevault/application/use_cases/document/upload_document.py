"""Upload document use case."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from notevault.application.dto.document_dto import Actor, DocumentUploadInput
from notevault.application.dto.stamp_options import provenance_text
from notevault.application.dto.watermark_jobs import ProducerStampJob, ProvenanceStampJob
from notevault.application.ports import JobQueue, ObjectStore, Watermarker
from notevault.application.use_cases.uploads import release_blob, validate_pdf_upload
from notevault.domain.entities import Document
from notevault.domain.exceptions import DuplicateDocument, StorageUnavailable, ValidationError
from notevault.domain.value_objects import ApprovalStatus, FileReference

logger = logging.getLogger(__name__)


class UploadDocumentUseCase:
    """Store an uploaded PDF, create the document row and queue its stamping job.

    Member uploads start pending and get a provenance stamp. Admin uploads are
    approved straight away and only get producer metadata.
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

    async def execute(self, actor: Actor, input_data: DocumentUploadInput) -> Document:
        """Upload document. Returns the created (pending or approved) document."""
        title = input_data.title.strip()
        if not title:
            raise ValidationError("Title is required")
        validate_pdf_upload(
            input_data.data,
            input_data.filename,
            input_data.content_type,
            self._max_upload_bytes,
            self._watermarker,
        )

        if input_data.document_id is not None:
            async with self._uow_factory() as uow:
                if await uow.documents.get_by_id(input_data.document_id):
                    raise DuplicateDocument(f"Document {input_data.document_id} already exists")

        stored = await self._object_store.put(
            input_data.data,
            owner_id=actor.user_id,
            filename=input_data.filename,
        )

        now = datetime.now(UTC)
        metadata = input_data.metadata
        document = Document(
            id=input_data.document_id or uuid4(),
            title=title,
            owner_id=actor.user_id,
            material_type=input_data.material_type,
            is_free=input_data.is_free if actor.is_admin else False,
            approval_status=ApprovalStatus.APPROVED if actor.is_admin else ApprovalStatus.PENDING,
            file=FileReference(url=stored.url, storage_handle=stored.handle),
            created_at=now,
            updated_at=now,
            expires_at=input_data.expires_at,
            course=metadata.get("course"),
            subject=metadata.get("subject"),
            field=metadata.get("field"),
            university_name=metadata.get("university_name"),
        )

        try:
            async with self._uow_factory() as uow:
                if await uow.documents.get_by_id(document.id):
                    raise DuplicateDocument(f"Document {document.id} already exists")
                await uow.documents.create(document)
        except BaseException:
            await release_blob(self._object_store, stored.handle)
            raise

        if actor.is_admin:
            job: ProvenanceStampJob | ProducerStampJob = ProducerStampJob(
                storage_handle=stored.handle,
                document_id=document.id,
                producer=self._brand_name,
                creator=f"{self._brand_name} Admin",
            )
        else:
            job = ProvenanceStampJob(
                storage_handle=stored.handle,
                document_id=document.id,
                stamp_text=provenance_text(actor.username, self._brand_name),
            )

        try:
            job_id = await self._job_queue.enqueue(job)
        except Exception as e:
            logger.error("Could not queue %s for document %s; rolling back upload", job.job_kind, document.id)
            async with self._uow_factory() as uow:
                await uow.documents.delete(document.id)
            await release_blob(self._object_store, stored.handle)
            raise StorageUnavailable("Could not queue document for processing") from e

        logger.info(
            "Document %s uploaded by %s (status=%s, job=%s)",
            document.id,
            actor.user_id,
            document.approval_status,
            job_id,
        )
        return document
