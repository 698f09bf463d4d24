"""Document version API resources."""

import logging
from uuid import UUID

import falcon.asgi

from notevault.application.dto.document_dto import VersionSubmitInput
from notevault.application.use_cases.document.queries import ListVersionsUseCase
from notevault.application.use_cases.version.promote_version import PromoteVersionUseCase
from notevault.application.use_cases.version.submit_version import SubmitVersionUseCase
from notevault.domain.exceptions import (
    AlreadyPromoted,
    Forbidden,
    InvalidState,
    MalformedDocument,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from notevault.interfaces.api.multipart import read_upload_form
from notevault.interfaces.api.serializers import document_to_dict, version_to_dict

logger = logging.getLogger(__name__)


class DocumentVersionsResource:
    """POST / GET /v1/documents/{id}/versions."""

    def __init__(
        self,
        submit_version: SubmitVersionUseCase,
        list_versions: ListVersionsUseCase,
    ) -> None:
        self._submit_version = submit_version
        self._list_versions = list_versions

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        """Multipart body: file + newTitle."""
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return
        try:
            doc_id = UUID(document_id)
        except ValueError:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
            return

        form = await read_upload_form(req)
        new_title = form.get("newTitle", "new_title", "title")
        if not form.file or not new_title:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "file and newTitle are required"}
            return

        try:
            version = await self._submit_version.execute(
                user.as_actor(),
                VersionSubmitInput(
                    document_id=doc_id,
                    new_title=new_title,
                    data=form.file.data,
                    filename=form.file.filename,
                    content_type=form.file.content_type,
                ),
            )
            resp.media = version_to_dict(version)
            resp.status = falcon.HTTP_201
        except NotFound:
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Only the owner can submit a new version"}
        except (InvalidState, ValidationError, MalformedDocument) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except StorageUnavailable:
            logger.exception("Version upload failed on storage or queue")
            resp.status = falcon.HTTP_503
            resp.media = {"error": "Storage temporarily unavailable, please retry"}

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return
        try:
            versions = await self._list_versions.execute(user.as_actor(), UUID(document_id))
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Document not found"}
            return
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            return
        resp.media = {"versions": [version_to_dict(v) for v in versions]}
        resp.status = falcon.HTTP_200


class VersionPromoteResource:
    """PUT /v1/versions/{id}/promote (admin)."""

    def __init__(self, promote_version: PromoteVersionUseCase) -> None:
        self._promote_version = promote_version

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, version_id: str
    ) -> None:
        user = getattr(req.context, "user", None)
        if not user:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            return
        try:
            result = await self._promote_version.execute(user.as_actor(), UUID(version_id))
            resp.media = {
                "document": document_to_dict(result.document),
                "version": version_to_dict(result.version),
            }
            resp.status = falcon.HTTP_200
        except Forbidden:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
        except (ValueError, NotFound):
            resp.status = falcon.HTTP_404
            resp.media = {"error": "Version not found"}
        except AlreadyPromoted as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
        except InvalidState as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
