"""JSON shapes returned by the API."""

from notevault.application.ports import DeadLetter
from notevault.domain.entities import Document, DocumentVersion


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def document_to_dict(d: Document) -> dict:
    live = d.live_file
    return {
        "id": str(d.id),
        "title": d.title,
        "owner_id": d.owner_id,
        "material_type": d.material_type.value,
        "is_free": d.is_free,
        "approval_status": d.approval_status.value,
        "rejection_reason": d.rejection_reason,
        "live_file_url": live.url if live else None,
        "view_count": d.view_count,
        "processed": d.processed_at is not None,
        "course": d.course,
        "subject": d.subject,
        "field": d.field,
        "university_name": d.university_name,
        "created_at": _iso(d.created_at),
        "updated_at": _iso(d.updated_at),
        "expires_at": _iso(d.expires_at),
    }


def version_to_dict(v: DocumentVersion) -> dict:
    return {
        "id": str(v.id),
        "document_id": str(v.document_id),
        "uploader_id": v.uploader_id,
        "title": v.title,
        "file_url": v.file.url,
        "content_hash": v.content_hash,
        "status": v.status.value,
        "is_current_live": v.is_current_live,
        "previous_version_id": str(v.previous_version_id) if v.previous_version_id else None,
        "processed": v.processed_at is not None,
        "uploaded_at": _iso(v.uploaded_at),
    }


def dead_letter_to_dict(d: DeadLetter) -> dict:
    return {
        "job_id": d.job_id,
        "payload": d.payload,
        "error": d.error,
        "attempts": d.attempts,
        "failed_at": _iso(d.failed_at),
    }
