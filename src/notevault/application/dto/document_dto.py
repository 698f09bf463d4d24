"""Document DTOs."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from notevault.domain.entities import Document, DocumentVersion
from notevault.domain.value_objects import MaterialType


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as seen by use cases."""

    user_id: str
    username: str
    is_admin: bool = False


@dataclass
class DocumentUploadInput:
    """Input for an initial upload."""

    title: str
    material_type: MaterialType
    data: bytes
    filename: str
    content_type: str | None = None
    is_free: bool = False
    document_id: UUID | None = None
    expires_at: datetime | None = None
    metadata: dict[str, str | None] = field(default_factory=dict)


@dataclass
class VersionSubmitInput:
    """Input for a new version of an existing document."""

    document_id: UUID
    new_title: str
    data: bytes
    filename: str
    content_type: str | None = None


@dataclass(frozen=True)
class PromotionResult:
    document: Document
    version: DocumentVersion


@dataclass(frozen=True)
class RenderedDocument:
    """Per-viewer rendition, never persisted."""

    content: bytes
    content_type: str
    filename: str
