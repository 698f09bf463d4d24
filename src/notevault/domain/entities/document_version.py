"""Document version entity."""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from notevault.domain.exceptions import AlreadyPromoted, InvalidState
from notevault.domain.value_objects import FileReference, VersionStatus


@dataclass
class DocumentVersion:
    """Candidate replacement for a document's live file."""

    id: UUID
    document_id: UUID
    uploader_id: str
    title: str
    file: FileReference
    content_hash: str
    status: VersionStatus
    uploaded_at: datetime
    is_current_live: bool = False
    previous_version_id: UUID | None = None
    processed_at: datetime | None = None

    def promote(self) -> "DocumentVersion":
        if self.is_current_live:
            raise AlreadyPromoted(f"Version {self.id} is already live")
        if self.processed_at is None:
            raise InvalidState("Version is still being processed")
        return replace(self, status=VersionStatus.APPROVED, is_current_live=True)

    def retire(self) -> "DocumentVersion":
        """Drop the live flag; the version stays approved."""
        return replace(self, is_current_live=False)
