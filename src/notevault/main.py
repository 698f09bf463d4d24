"""Application entry point and composition root."""

import logging

import uvicorn

from notevault import __version__
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
from notevault.config import Settings, get_settings
from notevault.context import AppContext
from notevault.infrastructure.auth.keycloak_provider import KeycloakProvider
from notevault.infrastructure.notifications.favorites_notifier import FavoritesNotifier
from notevault.interfaces.api.app import ApiResources, create_app
from notevault.interfaces.api.middleware.auth import AuthMiddleware
from notevault.interfaces.api.middleware.cors import CORSMiddleware
from notevault.interfaces.api.middleware.lifespan import ContextLifespanMiddleware
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
from notevault.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_resources(context: AppContext) -> ApiResources:
    """Wire use cases onto the adapters owned by ``context``."""
    settings = context.settings
    uow_factory = context.uow_factory
    notifier = FavoritesNotifier(uow_factory)

    upload_document = UploadDocumentUseCase(
        uow_factory,
        context.object_store,
        context.job_queue,
        context.watermarker,
        max_upload_bytes=settings.max_upload_bytes,
        brand_name=settings.brand_name,
    )
    submit_version = SubmitVersionUseCase(
        uow_factory,
        context.object_store,
        context.job_queue,
        context.watermarker,
        max_upload_bytes=settings.max_upload_bytes,
        brand_name=settings.brand_name,
    )
    promote_version = PromoteVersionUseCase(
        uow_factory, context.object_store, notifier, context.background
    )
    review_document = ReviewDocumentUseCase(uow_factory, notifier, context.background)
    render_for_viewer = RenderForViewerUseCase(
        uow_factory,
        context.object_store,
        context.watermarker,
        context.background,
        logo_bytes=context.logo_bytes,
    )

    return ApiResources(
        documents=DocumentsResource(upload_document),
        pending_documents=PendingDocumentsResource(ListPendingDocumentsUseCase(uow_factory)),
        document=DocumentResource(
            GetDocumentUseCase(uow_factory),
            DeleteDocumentUseCase(uow_factory, context.object_store),
            review_document,
            render_for_viewer,
        ),
        versions=DocumentVersionsResource(submit_version, ListVersionsUseCase(uow_factory)),
        promote=VersionPromoteResource(promote_version),
        favorite=FavoriteResource(FavoriteDocumentUseCase(uow_factory)),
        dead_jobs=DeadJobsResource(context.job_queue),
        health=HealthResource(context.readiness, context.queue_depth),
    )


def create_notevault_app(settings: Settings | None = None):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    context = AppContext(settings)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("KEYCLOAK_CLIENT_SECRET not set; every request is unauthenticated")

    return create_app(
        build_resources(context),
        middleware=[
            RequestIDMiddleware(),
            CORSMiddleware(settings.cors_origin_list),
            ContextLifespanMiddleware(context),
            AuthMiddleware(keycloak, admin_role=settings.admin_role),
        ],
        max_upload_bytes=settings.max_upload_bytes,
    )


def main() -> None:
    """CLI entry point - serve the API with uvicorn."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    logger.info("NoteVault v%s starting (%s)", __version__, settings.environment)
    uvicorn.run(
        create_notevault_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
