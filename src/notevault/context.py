"""Process-wide resources owned by one explicit context object."""

import logging
from pathlib import Path

import redis.asyncio as aioredis
from psycopg_pool import AsyncConnectionPool
from redis.exceptions import RedisError

from notevault.application.background import BackgroundTasks
from notevault.config import Settings
from notevault.infrastructure.persistence.postgres.connection import create_pool, ping
from notevault.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from notevault.infrastructure.queue.redis_job_queue import RedisJobQueue
from notevault.infrastructure.storage.local_object_store import LocalObjectStore
from notevault.infrastructure.storage.s3_object_store import S3ObjectStore
from notevault.infrastructure.watermark import PdfWatermarker

logger = logging.getLogger(__name__)


def create_object_store(settings: Settings) -> S3ObjectStore | LocalObjectStore:
    if settings.storage_backend == "s3":
        return S3ObjectStore(
            settings.s3_bucket,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            region=settings.s3_region,
            key_prefix=settings.storage_key_prefix,
            public_base_url=settings.storage_public_base_url,
            timeout_seconds=settings.storage_timeout_seconds,
        )
    return LocalObjectStore(
        settings.storage_local_root,
        key_prefix=settings.storage_key_prefix,
        public_base_url=settings.storage_public_base_url or "/files",
        timeout_seconds=settings.storage_timeout_seconds,
    )


def load_logo(path: str | None) -> bytes | None:
    if not path:
        return None
    return Path(path).read_bytes()


class AppContext:
    """Owns the DB pool, Redis client, object store and job queue.

    Built by the API composition root and by the worker; ``start`` opens the
    network resources and ``close`` releases them.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        pool: AsyncConnectionPool | None = None,
        redis_client: aioredis.Redis | None = None,
        object_store: S3ObjectStore | LocalObjectStore | None = None,
    ) -> None:
        self.settings = settings
        self.pool = pool or create_pool(
            settings.database_url,
            min_size=settings.database_pool_min_size,
            max_size=settings.database_pool_max_size,
        )
        self.redis = redis_client or aioredis.from_url(settings.redis_url, decode_responses=True)
        self.uow_factory = create_uow_factory(self.pool)
        self.object_store = object_store or create_object_store(settings)
        self.job_queue = RedisJobQueue(
            self.redis,
            queue_name=settings.queue_name,
            namespace=settings.queue_namespace,
            visibility_timeout_seconds=settings.job_visibility_timeout_seconds,
        )
        self.watermarker = PdfWatermarker(settings.watermark_font_path)
        self.background = BackgroundTasks()
        self.logo_bytes = load_logo(settings.watermark_logo_path)
        self._started = False

    async def start(self) -> None:
        if self._started:
            return
        await self.pool.open()
        self._started = True
        logger.info("Application context started (storage=%s)", self.settings.storage_backend)

    async def close(self) -> None:
        if not self._started:
            return
        await self.background.drain(timeout=10)
        await self.redis.aclose()
        await self.pool.close()
        self._started = False
        logger.info("Application context closed")

    async def readiness(self) -> dict[str, bool]:
        checks = {"database": await ping(self.pool)}
        try:
            checks["queue"] = bool(await self.redis.ping())
        except RedisError:
            logger.warning("Redis ping failed", exc_info=True)
            checks["queue"] = False
        checks["storage"] = await self.object_store.ping()
        return checks

    async def queue_depth(self) -> dict[str, int] | None:
        """Watermark queue sizes, or None while Redis is unreachable."""
        try:
            return await self.job_queue.depth()
        except RedisError:
            logger.warning("Could not read watermark queue depth", exc_info=True)
            return None

    async def __aenter__(self) -> "AppContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()
