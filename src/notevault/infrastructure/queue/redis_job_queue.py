"""Redis-backed watermark job queue with visibility timeouts and a dead-letter store.

Keys (``{namespace}:{queue}:...``):

- ``ready``: sorted set of job ids scored by the time they become claimable
- ``leases``: sorted set of claimed job ids scored by their visibility deadline
- ``jobs``: hash of job id -> JSON payload
- ``attempts``: hash of job id -> number of deliveries so far
- ``dead``: hash of job id -> dead-letter record, ``dead_index`` keeps newest first
"""

import json
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

import pydantic
from redis.asyncio import Redis
from redis.exceptions import WatchError

from notevault.application.dto.watermark_jobs import (
    ProducerStampJob,
    ProvenanceStampJob,
    decode_job,
    encode_job,
)
from notevault.application.ports import DeadLetter, JobDelivery

logger = logging.getLogger(__name__)


class RedisJobQueue:
    """At-least-once queue. A claimed job that is not acked in time is claimable again."""

    def __init__(
        self,
        client: Redis,
        *,
        queue_name: str = "watermark",
        namespace: str = "notevault",
        visibility_timeout_seconds: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._visibility_timeout = visibility_timeout_seconds
        self._clock = clock
        base = f"{namespace}:{queue_name}"
        self._ready = f"{base}:ready"
        self._leases = f"{base}:leases"
        self._jobs = f"{base}:jobs"
        self._attempts = f"{base}:attempts"
        self._dead = f"{base}:dead"
        self._dead_index = f"{base}:dead_index"

    async def enqueue(self, job: ProvenanceStampJob | ProducerStampJob) -> str:
        job_id = uuid4().hex
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(self._jobs, job_id, encode_job(job))
            pipe.zadd(self._ready, {job_id: self._clock()})
            await pipe.execute()
        logger.info("Enqueued %s job %s for document %s", job.job_kind, job_id, job.document_id)
        return job_id

    async def claim(self) -> JobDelivery | None:
        """Lease the oldest ready job. Exactly one caller wins each job."""
        while True:
            now = self._clock()
            deadline = now + self._visibility_timeout
            async with self._client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(self._ready)
                    ids = await pipe.zrangebyscore(self._ready, "-inf", now, start=0, num=1)
                    if not ids:
                        return None
                    job_id = ids[0]
                    pipe.multi()
                    pipe.zrem(self._ready, job_id)
                    pipe.zadd(self._leases, {job_id: deadline})
                    pipe.hincrby(self._attempts, job_id, 1)
                    pipe.hget(self._jobs, job_id)
                    _, _, attempts, raw = await pipe.execute()
                except WatchError:
                    continue

            if raw is None:
                logger.warning("Job %s has no payload; dropping lease", job_id)
                async with self._client.pipeline(transaction=True) as pipe:
                    pipe.zrem(self._leases, job_id)
                    pipe.hdel(self._attempts, job_id)
                    await pipe.execute()
                continue
            try:
                job = decode_job(raw)
            except pydantic.ValidationError as e:
                async with self._client.pipeline(transaction=True) as pipe:
                    self._queue_bury(pipe, job_id, raw, f"Undecodable payload: {e}", int(attempts))
                    await pipe.execute()
                logger.error("Job %s has an undecodable payload; moved to dead letters", job_id)
                continue
            return JobDelivery(job_id=job_id, job=job, attempts=int(attempts), lease_deadline=deadline)

    async def ack(self, delivery: JobDelivery) -> bool:
        """Forget a finished job. Returns False if the lease had already passed to another delivery."""

        def forget(pipe) -> None:
            pipe.zrem(self._leases, delivery.job_id)
            pipe.hdel(self._jobs, delivery.job_id)
            pipe.hdel(self._attempts, delivery.job_id)

        return await self._settle(delivery, forget, "ack")

    async def retry(self, delivery: JobDelivery, delay_seconds: float, error: str) -> bool:
        def reschedule(pipe) -> None:
            pipe.zrem(self._leases, delivery.job_id)
            pipe.zadd(self._ready, {delivery.job_id: self._clock() + delay_seconds})

        if not await self._settle(delivery, reschedule, "retry"):
            return False
        logger.warning(
            "Job %s retry %d scheduled in %.1fs: %s",
            delivery.job_id,
            delivery.attempts,
            delay_seconds,
            error,
        )
        return True

    async def dead_letter(self, delivery: JobDelivery, error: str) -> bool:
        raw = encode_job(delivery.job)

        def bury(pipe) -> None:
            self._queue_bury(pipe, delivery.job_id, raw, error, delivery.attempts)

        return await self._settle(delivery, bury, "dead-letter")

    async def _settle(self, delivery: JobDelivery, queue_commands: Callable, action: str) -> bool:
        """Run ``queue_commands`` in one transaction while ``delivery`` still holds the lease."""
        while True:
            async with self._client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(self._leases)
                    held = await pipe.zscore(self._leases, delivery.job_id)
                    if held != delivery.lease_deadline:
                        logger.warning(
                            "Skipping %s of job %s: this delivery no longer holds the lease",
                            action,
                            delivery.job_id,
                        )
                        return False
                    pipe.multi()
                    queue_commands(pipe)
                    await pipe.execute()
                    return True
                except WatchError:
                    continue

    def _queue_bury(self, pipe, job_id: str, raw: str, error: str, attempts: int) -> None:
        try:
            payload = json.loads(raw)
        except ValueError:
            payload = {"raw": raw}
        record = json.dumps(
            {
                "payload": payload,
                "error": error,
                "attempts": attempts,
                "failedAt": datetime.fromtimestamp(self._clock(), UTC).isoformat(),
            }
        )
        pipe.zrem(self._leases, job_id)
        pipe.zrem(self._ready, job_id)
        pipe.hdel(self._jobs, job_id)
        pipe.hdel(self._attempts, job_id)
        pipe.hset(self._dead, job_id, record)
        pipe.lrem(self._dead_index, 0, job_id)
        pipe.lpush(self._dead_index, job_id)

    async def requeue_expired(self) -> int:
        """Return jobs whose lease ran out to the ready set."""
        now = self._clock()
        expired = await self._client.zrangebyscore(self._leases, "-inf", now)
        moved = 0
        for job_id in expired:
            if await self._requeue_lease(job_id, now):
                moved += 1
        if moved:
            logger.warning("Requeued %d job(s) with expired leases", moved)
        return moved

    async def _requeue_lease(self, job_id: str, now: float) -> bool:
        """Move one expired lease back to the ready set in a single transaction."""
        while True:
            async with self._client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(self._leases)
                    deadline = await pipe.zscore(self._leases, job_id)
                    if deadline is None or deadline > now:
                        return False
                    pipe.multi()
                    pipe.zrem(self._leases, job_id)
                    pipe.zadd(self._ready, {job_id: now})
                    await pipe.execute()
                    return True
                except WatchError:
                    continue

    async def list_dead_letters(self, limit: int = 50) -> list[DeadLetter]:
        ids = await self._client.lrange(self._dead_index, 0, limit - 1)
        if not ids:
            return []
        raws = await self._client.hmget(self._dead, ids)
        letters = []
        for job_id, raw in zip(ids, raws):
            if raw is None:
                continue
            record = json.loads(raw)
            letters.append(
                DeadLetter(
                    job_id=job_id,
                    payload=record["payload"],
                    error=record["error"],
                    attempts=record["attempts"],
                    failed_at=datetime.fromisoformat(record["failedAt"]),
                )
            )
        return letters

    async def replay_dead_letter(self, job_id: str) -> bool:
        """Put a dead job back on the ready set with a fresh attempt count."""
        while True:
            async with self._client.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(self._dead)
                    raw = await pipe.hget(self._dead, job_id)
                    if raw is None:
                        return False
                    record = json.loads(raw)
                    pipe.multi()
                    pipe.hdel(self._dead, job_id)
                    pipe.lrem(self._dead_index, 0, job_id)
                    pipe.hset(self._jobs, job_id, json.dumps(record["payload"]))
                    pipe.hdel(self._attempts, job_id)
                    pipe.zadd(self._ready, {job_id: self._clock()})
                    await pipe.execute()
                except WatchError:
                    continue
            logger.info("Replayed dead job %s", job_id)
            return True

    async def depth(self) -> dict[str, int]:
        """Queue sizes; the readiness check reads them."""
        async with self._client.pipeline(transaction=False) as pipe:
            pipe.zcard(self._ready)
            pipe.zcard(self._leases)
            pipe.hlen(self._dead)
            ready, leased, dead = await pipe.execute()
        return {"ready": ready, "leased": leased, "dead": dead}
