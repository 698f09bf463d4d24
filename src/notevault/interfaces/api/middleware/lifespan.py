"""Lifespan middleware - starts the application context on startup, closes it on shutdown."""

from typing import Any

from notevault.context import AppContext


class ContextLifespanMiddleware:
    def __init__(self, context: AppContext) -> None:
        self._context = context

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        """Open DB pool when ASGI server starts."""
        await self._context.start()

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        """Drain background tasks, close Redis and the pool."""
        await self._context.close()
