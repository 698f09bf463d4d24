"""Falcon ASGI application."""

import logging
from dataclasses import dataclass

import falcon
import falcon.asgi
from falcon.asgi import App

from notevault.interfaces.api.resources.documents import (
    DocumentResource,
    DocumentsResource,
    PendingDocumentsResource,
)
from notevault.interfaces.api.resources.favorites import FavoriteResource
from notevault.interfaces.api.resources.health import HealthResource
from notevault.interfaces.api.resources.jobs import DeadJobsResource
from notevault.interfaces.api.resources.versions import (
    DocumentVersionsResource,
    VersionPromoteResource,
)

logger = logging.getLogger(__name__)


@dataclass
class ApiResources:
    documents: DocumentsResource
    pending_documents: PendingDocumentsResource
    document: DocumentResource
    versions: DocumentVersionsResource
    promote: VersionPromoteResource
    favorite: FavoriteResource
    dead_jobs: DeadJobsResource
    health: HealthResource


async def _handle_uncaught(req, resp, ex, params) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}


def create_app(
    resources: ApiResources,
    middleware: list | None = None,
    max_upload_bytes: int = 20 * 1024 * 1024,
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=middleware or [])

    multipart = falcon.media.MultipartFormHandler()
    # Room for the PDF part plus the text fields around it.
    multipart.parse_options.max_body_part_buffer_size = max_upload_bytes + 64 * 1024
    app.req_options.media_handlers[falcon.MEDIA_MULTIPART] = multipart

    app.add_error_handler(Exception, _handle_uncaught)

    app.add_route("/v1/health", resources.health)
    app.add_route("/v1/health/ready", resources.health, suffix="ready")
    app.add_route("/v1/documents", resources.documents)
    app.add_route("/v1/documents/pending", resources.pending_documents)
    app.add_route("/v1/documents/{document_id}", resources.document)
    app.add_route("/v1/documents/{document_id}/upload", resources.documents, suffix="upload")
    app.add_route("/v1/documents/{document_id}/review", resources.document, suffix="review")
    app.add_route("/v1/documents/{document_id}/view", resources.document, suffix="view")
    app.add_route("/v1/documents/{document_id}/versions", resources.versions)
    app.add_route("/v1/documents/{document_id}/favorite", resources.favorite)
    app.add_route("/v1/versions/{version_id}/promote", resources.promote)
    app.add_route("/v1/admin/jobs/dead", resources.dead_jobs)
    app.add_route("/v1/admin/jobs/dead/{job_id}/replay", resources.dead_jobs, suffix="replay")
    return app
