"""Document API resources."""

import logging
from datetime import datetime
from urllib.parse import quote
from uuid import UUID

import falcon.asgi

from notevault.application.dto.document_dto import DocumentUploadInput
from notevault.application.use_cases.document.delete_document import DeleteDocumentUseCase
from notevault.application.use_cases.document.queries import (
    GetDocumentUseCase,
    ListPendingDocumentsUseCase,
)
from notevault.application.use_cases.document.render_for_viewer import RenderForViewerUseCase
from notevault.application.use_cases.document.review_document import (
    ReviewAction,
    ReviewDocumentUseCase,
)
from notevault.application.use_cases.document.upload_document import UploadDocumentUseCase
from notevault.domain.exceptions import (
    DuplicateDocument,
    Forbidden,
    InvalidState,
    MalformedDocument,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from notevault.domain.value_objects import MaterialType
from notevault.interfaces.api.multipart import read_upload_form
from notevault.interfaces.api.serializers import document_to_dict

logger = logging.getLogger(__name__)

_METADATA_FIELDS = {
    "course": ("course",),
    "subject": ("subject",),
    "field": ("field",),
    "university_name": ("universityName", "university_name"),
}


def _unauthorized(resp: falcon.asgi.Response) -> None:
    resp.status = falcon.HTTP_401
    resp.media = {"error": "Unauthorized"}


def _parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class DocumentsResource:
    """POST /v1/documents and POST /v1/documents/{id}/upload - initial upload."""

    def __init__(self, upload_document: UploadDocumentUseCase) -> None:
        self._upload_document = upload_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Upload with a server-generated id."""
        await self._upload(req, resp, None)

    async def on_post_upload(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        """Upload with a client-chosen id; 409 if it is taken."""
        try:
            doc_id = UUID(document_id)
        except ValueError:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid document id"}
            return
        await self._upload(req, resp, doc_id)

    async def _upload(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: UUID | None
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return

        form = await read_upload_form(req)
        title = form.get("title")
        if not form.file or not title:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "file and title are required"}
            return
        try:
            material_type = MaterialType(form.get("materialType", "material_type") or "personal")
            expires_raw = form.get("expiresAt", "expires_at")
            expires_at = datetime.fromisoformat(expires_raw) if expires_raw else None
        except ValueError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        input_data = DocumentUploadInput(
            title=title,
            material_type=material_type,
            data=form.file.data,
            filename=form.file.filename,
            content_type=form.file.content_type,
            is_free=_parse_bool(form.get("isFree", "is_free")),
            document_id=document_id,
            expires_at=expires_at,
            metadata={key: form.get(*names) for key, names in _METADATA_FIELDS.items()},
        )
        try:
            document = await self._upload_document.execute(user.as_actor(), input_data)
            resp.media = document_to_dict(document)
            resp.status = falcon.HTTP_201
        except (ValidationError, MalformedDocument) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except DuplicateDocument as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
        except StorageUnavailable:
            logger.exception("Upload failed on storage or queue")
            resp.status = falcon.HTTP_503
            resp.media = {"error": "Storage temporarily unavailable, please retry"}


class PendingDocumentsResource:
    """GET /v1/documents/pending - review queue (admin)."""

    def __init__(self, list_pending: ListPendingDocumentsUseCase) -> None:
        self._list_pending = list_pending

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return
        limit = req.get_param_as_int("limit", min_value=1, max_value=200) or 50
        try:
            documents = await self._list_pending.execute(user.as_actor(), limit=limit)
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return
        resp.media = {"documents": [document_to_dict(d) for d in documents]}
        resp.status = falcon.HTTP_200


class DocumentResource:
    """GET / DELETE /v1/documents/{id}, PUT .../review, GET .../view."""

    def __init__(
        self,
        get_document: GetDocumentUseCase,
        delete_document: DeleteDocumentUseCase,
        review_document: ReviewDocumentUseCase,
        render_for_viewer: RenderForViewerUseCase,
    ) -> None:
        self._get_document = get_document
        self._delete_document = delete_document
        self._review_document = review_document
        self._render_for_viewer = render_for_viewer

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return
        try:
            document = await self._get_document.execute(user.as_actor(), UUID(document_id))
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
            return
        resp.media = document_to_dict(document)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return
        try:
            await self._delete_document.execute(user.as_actor(), UUID(document_id))
            resp.status = falcon.HTTP_204
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}

    async def on_put_review(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        """Body: {"action": "approve" | "reject", "reason": "..."}."""
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return
        try:
            doc_id = UUID(document_id)
            body = await req.get_media()
            action = ReviewAction(body["action"])
            reason = body.get("reason")
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": f"Invalid review request: {e}"}
            return
        try:
            document = await self._review_document.execute(user.as_actor(), doc_id, action, reason)
            resp.media = document_to_dict(document)
            resp.status = falcon.HTTP_200
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except InvalidState as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}

    async def on_get_view(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        """Stream the viewer-stamped PDF inline."""
        user = getattr(req.context, "user", None)
        if not user:
            _unauthorized(resp)
            return
        try:
            rendered = await self._render_for_viewer.execute(UUID(document_id), user.as_actor())
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found or not approved"}
            return
        except StorageUnavailable:
            logger.exception("Storage fetch failed while rendering document %s", document_id)
            resp.status = falcon.HTTP_500
            resp.media = {"error": "Could not render document"}
            return
        except Exception:
            logger.exception("Stamping failed while rendering document %s", document_id)
            resp.status = falcon.HTTP_500
            resp.media = {"error": "Could not render document"}
            return

        resp.status = falcon.HTTP_200
        resp.content_type = rendered.content_type
        resp.data = rendered.content
        ascii_name = rendered.filename.encode("ascii", "ignore").decode() or "document.pdf"
        resp.set_header(
            "Content-Disposition",
            f"inline; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(rendered.filename)}",
        )
        resp.set_header("Content-Security-Policy", "frame-src 'self' blob:")
        resp.set_header("Cache-Control", "private, no-store")
