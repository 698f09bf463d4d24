"""Long-running consumer of the watermark job queue."""

import asyncio
import logging

from notevault.application.ports import JobDelivery, JobQueue
from notevault.application.use_cases.watermark.process_watermark_job import (
    ProcessWatermarkJobUseCase,
)
from notevault.domain.exceptions import MalformedDocument

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_seconds: float, max_seconds: float) -> float:
    """base * 2^(attempt-1), capped."""
    return min(max_seconds, base_seconds * (2 ** max(attempt - 1, 0)))


class WatermarkWorker:
    """Claims jobs, runs them and acks, retries or dead-letters each one.

    Several instances (and several slots within one instance) may run at once;
    the queue guarantees at-least-once delivery and the job processor is
    idempotent.
    """

    def __init__(
        self,
        job_queue: JobQueue,
        process_job: ProcessWatermarkJobUseCase,
        *,
        concurrency: int = 2,
        max_attempts: int = 5,
        backoff_base_seconds: float = 2.0,
        backoff_max_seconds: float = 300.0,
        poll_interval_seconds: float = 1.0,
    ) -> None:
        self._queue = job_queue
        self._process_job = process_job
        self._concurrency = concurrency
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._poll_interval = poll_interval_seconds
        self._stopping = asyncio.Event()

    def stop(self) -> None:
        """Finish in-flight jobs and exit the loops."""
        if not self._stopping.is_set():
            logger.info("Watermark worker stopping")
        self._stopping.set()

    async def run(self) -> None:
        logger.info("Watermark worker started with %d slot(s)", self._concurrency)
        async with asyncio.TaskGroup() as group:
            for slot in range(self._concurrency):
                group.create_task(self._slot_loop(slot), name=f"watermark-slot-{slot}")
        logger.info("Watermark worker stopped")

    async def run_once(self) -> bool:
        """Requeue expired leases, then claim and handle at most one job."""
        await self._queue.requeue_expired()
        delivery = await self._queue.claim()
        if delivery is None:
            return False
        await self.handle(delivery)
        return True

    async def handle(self, delivery: JobDelivery) -> None:
        job = delivery.job
        try:
            await self._process_job.execute(job)
        except MalformedDocument as e:
            logger.error(
                "Job %s (%s, document %s) is permanently broken; dead-lettering: %s",
                delivery.job_id,
                job.job_kind,
                job.document_id,
                e,
            )
            await self._queue.dead_letter(delivery, f"MalformedDocument: {e}")
            return
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            if delivery.attempts >= self._max_attempts:
                logger.error(
                    "Job %s (%s, document %s) failed %d time(s); dead-lettering",
                    delivery.job_id,
                    job.job_kind,
                    job.document_id,
                    delivery.attempts,
                    exc_info=True,
                )
                await self._queue.dead_letter(delivery, error)
                return
            delay = backoff_delay(delivery.attempts, self._backoff_base, self._backoff_max)
            logger.warning("Job %s attempt %d failed: %s", delivery.job_id, delivery.attempts, error)
            await self._queue.retry(delivery, delay, error)
            return
        if await self._queue.ack(delivery):
            logger.info("Job %s (%s) done for document %s", delivery.job_id, job.job_kind, job.document_id)

    async def _slot_loop(self, slot: int) -> None:
        while not self._stopping.is_set():
            try:
                worked = await self.run_once()
            except Exception:
                # Queue backend errors: log, back off, keep the slot alive.
                logger.exception("Worker slot %d failed to talk to the queue", slot)
                worked = False
            if not worked:
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=self._poll_interval)
                except TimeoutError:
                    pass
