"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from notevault.application.background import BackgroundTasks
from notevault.application.use_cases.document.delete_document import DeleteDocumentUseCase
from notevault.application.use_cases.document.favorite_document import FavoriteDocumentUseCase
from notevault.application.use_cases.document.queries import (
    GetDocumentUseCase,
    ListPendingDocumentsUseCase,
    ListVersionsUseCase,
)
from notevault.application.use_cases.document.render_for_viewer import RenderForViewerUseCase
from notevault.application.use_cases.document.review_document import ReviewDocumentUseCase
from notevault.application.use_cases.document.upload_document import UploadDocumentUseCase
from notevault.application.use_cases.version.promote_version import PromoteVersionUseCase
from notevault.application.use_cases.version.submit_version import SubmitVersionUseCase
from notevault.infrastructure.notifications.favorites_notifier import FavoritesNotifier
from notevault.interfaces.api.app import ApiResources, create_app
from notevault.interfaces.api.middleware.auth import RequestUser
from notevault.interfaces.api.middleware.request_id import RequestIDMiddleware
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

MAX_UPLOAD_BYTES = 1024 * 1024

TEST_USERS = {
    "alice": RequestUser(user_id="user-1", username="alice"),
    "bob": RequestUser(user_id="user-2", username="bob"),
    "root": RequestUser(user_id="admin-1", username="root", roles=["admin"], is_admin=True),
}


class AuthBypassMiddleware:
    """Middleware that sets context.user from the X-Test-User header (default alice)."""

    async def process_request(self, req, resp):
        req.context.user = TEST_USERS.get(req.get_header("X-Test-User") or "alice")


def as_user(name: str) -> dict[str, str]:
    return {"X-Test-User": name}


def multipart_body(
    fields: dict[str, str],
    file_bytes: bytes | None = None,
    *,
    filename: str = "notes.pdf",
    content_type: str = "application/pdf",
    boundary: str = "----NoteVaultBoundary",
) -> tuple[bytes, dict[str, str]]:
    """Hand-built multipart/form-data body plus its Content-Type header."""
    chunks = []
    for name, value in fields.items():
        chunks.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            ).encode()
        )
    if file_bytes is not None:
        chunks.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + file_bytes
            + b"\r\n"
        )
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks), {"Content-Type": f"multipart/form-data; boundary={boundary}"}


@pytest.fixture
def background() -> BackgroundTasks:
    """Plain instance; async tests drain it themselves."""
    return BackgroundTasks()


@pytest.fixture
def app(uow_factory, object_store, job_queue, watermarker, background):
    """Falcon ASGI app wired to in-memory adapters."""
    notifier = FavoritesNotifier(uow_factory)
    upload_document = UploadDocumentUseCase(
        uow_factory,
        object_store,
        job_queue,
        watermarker,
        max_upload_bytes=MAX_UPLOAD_BYTES,
        brand_name="NoteVault",
    )
    submit_version = SubmitVersionUseCase(
        uow_factory,
        object_store,
        job_queue,
        watermarker,
        max_upload_bytes=MAX_UPLOAD_BYTES,
        brand_name="NoteVault",
    )
    resources = ApiResources(
        documents=DocumentsResource(upload_document),
        pending_documents=PendingDocumentsResource(ListPendingDocumentsUseCase(uow_factory)),
        document=DocumentResource(
            GetDocumentUseCase(uow_factory),
            DeleteDocumentUseCase(uow_factory, object_store),
            ReviewDocumentUseCase(uow_factory, notifier, background),
            RenderForViewerUseCase(uow_factory, object_store, watermarker, background),
        ),
        versions=DocumentVersionsResource(submit_version, ListVersionsUseCase(uow_factory)),
        promote=VersionPromoteResource(
            PromoteVersionUseCase(uow_factory, object_store, notifier, background)
        ),
        favorite=FavoriteResource(FavoriteDocumentUseCase(uow_factory)),
        dead_jobs=DeadJobsResource(job_queue),
        health=HealthResource(),
    )
    return create_app(
        resources,
        middleware=[RequestIDMiddleware(), AuthBypassMiddleware()],
        max_upload_bytes=MAX_UPLOAD_BYTES,
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)
