"""Health check endpoints."""

from collections.abc import Awaitable, Callable

import falcon.asgi


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(
        self,
        readiness: Callable[[], Awaitable[dict[str, bool]]] | None = None,
        queue_depth: Callable[[], Awaitable[dict[str, int] | None]] | None = None,
    ) -> None:
        self._readiness = readiness
        self._queue_depth = queue_depth

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (DB, Redis, object store) plus watermark queue sizes."""
        checks = await self._readiness() if self._readiness else {}
        ready = all(checks.values())
        body = {"status": "ready" if ready else "unavailable", "checks": checks}
        if self._queue_depth is not None:
            depth = await self._queue_depth()
            if depth is not None:
                body["queue"] = depth
        resp.media = body
        resp.status = falcon.HTTP_200 if ready else falcon.HTTP_503
