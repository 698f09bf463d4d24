"""Apply a queued watermark job to its stored file."""

import asyncio
import logging
from datetime import UTC, datetime

from notevault.application.dto.stamp_options import producer_options, provenance_options
from notevault.application.dto.watermark_jobs import ProducerStampJob, ProvenanceStampJob
from notevault.application.ports import ObjectStore, Watermarker

logger = logging.getLogger(__name__)


class ProcessWatermarkJobUseCase:
    """Fetch -> stamp -> overwrite the same handle -> mark the target processed.

    Safe to run more than once for the same job: re-stamping replaces the
    existing mark of the same kind instead of adding another one.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        object_store: ObjectStore,
        watermarker: Watermarker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._object_store = object_store
        self._watermarker = watermarker

    async def execute(self, job: ProvenanceStampJob | ProducerStampJob) -> bool:
        """Process job. Returns False when there was nothing left to do."""
        if not await self._target_needs_work(job):
            return False

        source = await self._object_store.get(job.storage_handle)
        stamped = await asyncio.to_thread(self._apply, source, job)
        await self._object_store.overwrite(job.storage_handle, stamped)

        now = datetime.now(UTC)
        version_id = getattr(job, "version_id", None)
        async with self._uow_factory() as uow:
            if version_id is not None:
                marked = await uow.versions.mark_processed(version_id, now)
            else:
                marked = await uow.documents.mark_processed(job.document_id, now)
        if not marked:
            logger.info("Target of %s job for document %s vanished while stamping", job.job_kind, job.document_id)
        return marked

    def _apply(self, source: bytes, job: ProvenanceStampJob | ProducerStampJob) -> bytes:
        if isinstance(job, ProducerStampJob):
            data = source
            if job.stamp_text:
                data = self._watermarker.stamp(data, provenance_options(job.stamp_text))
            return self._watermarker.stamp(data, producer_options(job.producer, job.creator))
        return self._watermarker.stamp(source, provenance_options(job.stamp_text))

    async def _target_needs_work(self, job: ProvenanceStampJob | ProducerStampJob) -> bool:
        version_id = getattr(job, "version_id", None)
        async with self._uow_factory() as uow:
            if version_id is not None:
                version = await uow.versions.get_by_id(version_id)
                if version is None:
                    logger.info("Version %s no longer exists; skipping job", version_id)
                    return False
                if version.processed_at is not None:
                    logger.info("Version %s already stamped; skipping job", version_id)
                    return False
                if version.file.storage_handle != job.storage_handle:
                    logger.warning("Version %s no longer uses handle %s; skipping job", version_id, job.storage_handle)
                    return False
                return True

            document = await uow.documents.get_by_id(job.document_id)
            if document is None:
                logger.info("Document %s no longer exists; skipping job", job.document_id)
                return False
            if document.processed_at is not None:
                logger.info("Document %s already stamped; skipping job", job.document_id)
                return False
            if document.file.storage_handle != job.storage_handle:
                logger.warning("Document %s no longer uses handle %s; skipping job", job.document_id, job.storage_handle)
                return False
            return True
