"""PostgreSQL async connection pool."""

import logging

from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


def create_pool(conninfo: str, min_size: int = 2, max_size: int = 10) -> AsyncConnectionPool:
    """Create async connection pool.

    Pool is created with open=False. Caller must call await pool.open()
    before use (AppContext.start does this for both the API and the worker).
    """
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,
    )


async def ping(pool: AsyncConnectionPool) -> bool:
    """Readiness check: one round trip on a pooled connection."""
    try:
        async with pool.connection() as conn:
            await conn.execute("SELECT 1")
    except Exception:
        logger.warning("Database ping failed", exc_info=True)
        return False
    return True
