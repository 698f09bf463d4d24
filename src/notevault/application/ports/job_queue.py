"""Job queue port - at-least-once delivery of watermark jobs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from notevault.application.dto.watermark_jobs import ProducerStampJob, ProvenanceStampJob


@dataclass(frozen=True)
class JobDelivery:
    """A claimed job. ``attempts`` counts this delivery.

    ``lease_deadline`` identifies the lease; once it expires and the job is
    claimed again, settling this delivery is refused.
    """

    job_id: str
    job: ProvenanceStampJob | ProducerStampJob
    attempts: int
    lease_deadline: float


@dataclass(frozen=True)
class DeadLetter:
    """A job that will not be retried automatically."""

    job_id: str
    payload: dict[str, Any]
    error: str
    attempts: int
    failed_at: datetime


class JobQueue(Protocol):
    """Port for the watermark job queue.

    A claimed job that is neither acked, retried nor dead-lettered before its
    visibility timeout becomes claimable again.
    """

    async def enqueue(self, job: ProvenanceStampJob | ProducerStampJob) -> str: ...

    async def claim(self) -> JobDelivery | None: ...

    async def ack(self, delivery: JobDelivery) -> bool: ...

    async def retry(self, delivery: JobDelivery, delay_seconds: float, error: str) -> bool: ...

    async def dead_letter(self, delivery: JobDelivery, error: str) -> bool: ...

    async def requeue_expired(self) -> int: ...

    async def list_dead_letters(self, limit: int = 50) -> list[DeadLetter]: ...

    async def replay_dead_letter(self, job_id: str) -> bool: ...
