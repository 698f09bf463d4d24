"""Dead-letter administration for watermark jobs."""

import falcon.asgi

from notevault.application.ports import JobQueue
from notevault.interfaces.api.serializers import dead_letter_to_dict


class DeadJobsResource:
    """GET /v1/admin/jobs/dead, POST /v1/admin/jobs/dead/{job_id}/replay."""

    def __init__(self, job_queue: JobQueue) -> None:
        self._job_queue = job_queue

    def _require_admin(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> bool:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return False
        if not user.is_admin:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return False
        return True

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if not self._require_admin(req, resp):
            return
        limit = req.get_param_as_int("limit", min_value=1, max_value=500) or 50
        letters = await self._job_queue.list_dead_letters(limit=limit)
        resp.media = {"jobs": [dead_letter_to_dict(d) for d in letters]}
        resp.status = falcon.HTTP_200

    async def on_post_replay(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, job_id: str
    ) -> None:
        if not self._require_admin(req, resp):
            return
        if not await self._job_queue.replay_dead_letter(job_id):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Dead job not found"}
            return
        resp.media = {"job_id": job_id, "replayed": True}
        resp.status = falcon.HTTP_202
