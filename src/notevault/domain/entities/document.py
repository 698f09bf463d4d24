"""Document entity."""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from notevault.domain.exceptions import InvalidState, ValidationError
from notevault.domain.value_objects import ApprovalStatus, FileReference, MaterialType


@dataclass
class Document:
    """One logical note, independent of which file version is live.

    ``file`` always points at the current master copy. It only counts as the
    live file once the document is approved.
    """

    id: UUID
    title: str
    owner_id: str
    material_type: MaterialType
    is_free: bool
    approval_status: ApprovalStatus
    file: FileReference
    created_at: datetime
    updated_at: datetime
    rejection_reason: str | None = None
    view_count: int = 0
    expires_at: datetime | None = None
    processed_at: datetime | None = None
    course: str | None = None
    subject: str | None = None
    field: str | None = None
    university_name: str | None = None

    @property
    def live_file(self) -> FileReference | None:
        if self.approval_status is ApprovalStatus.APPROVED:
            return self.file
        return None

    def is_servable(self, now: datetime) -> bool:
        """Approved and not past its expiry."""
        if self.approval_status is not ApprovalStatus.APPROVED:
            return False
        return self.expires_at is None or self.expires_at > now

    def approve(self, now: datetime) -> "Document":
        if self.approval_status is ApprovalStatus.APPROVED:
            raise InvalidState("Document is already approved")
        if self.processed_at is None:
            raise InvalidState("Document is still being processed")
        return replace(
            self,
            approval_status=ApprovalStatus.APPROVED,
            rejection_reason=None,
            updated_at=now,
        )

    def reject(self, reason: str, now: datetime) -> "Document":
        if not reason or not reason.strip():
            raise ValidationError("A reason is required for rejection")
        if self.approval_status is ApprovalStatus.REJECTED:
            raise InvalidState("Document is already rejected")
        return replace(
            self,
            approval_status=ApprovalStatus.REJECTED,
            rejection_reason=reason.strip(),
            updated_at=now,
        )

    def with_live_version(self, title: str, file: FileReference, now: datetime) -> "Document":
        """Point the document at a promoted version's file."""
        return replace(
            self,
            title=title,
            file=file,
            approval_status=ApprovalStatus.APPROVED,
            rejection_reason=None,
            updated_at=now,
        )
