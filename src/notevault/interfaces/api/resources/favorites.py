"""Favorite API resource."""

from uuid import UUID

import falcon.asgi

from notevault.application.use_cases.document.favorite_document import FavoriteDocumentUseCase
from notevault.domain.exceptions import NotFound


class FavoriteResource:
    """POST / DELETE /v1/documents/{id}/favorite - current user."""

    def __init__(self, favorite_document: FavoriteDocumentUseCase) -> None:
        self._favorite_document = favorite_document

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return
        try:
            created = await self._favorite_document.add(user.as_actor(), UUID(document_id))
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
            return
        resp.media = {"document_id": document_id, "favorite": True}
        resp.status = falcon.HTTP_201 if created else falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return
        try:
            await self._favorite_document.remove(user.as_actor(), UUID(document_id))
        except ValueError:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
            return
        resp.status = falcon.HTTP_204
