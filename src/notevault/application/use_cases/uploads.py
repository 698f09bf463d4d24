"""Shared checks for uploaded PDF files."""

import logging

from notevault.application.ports import ObjectStore, Watermarker
from notevault.domain.exceptions import NotFound, StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = frozenset({"application/pdf", "application/x-pdf"})


def validate_pdf_upload(
    data: bytes,
    filename: str,
    content_type: str | None,
    max_bytes: int,
    watermarker: Watermarker,
) -> int:
    """Check size, type and structure of an upload. Returns page count.

    Raises ValidationError (empty, too large, not a PDF) or MalformedDocument.
    """
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > max_bytes:
        raise ValidationError(
            f"File size exceeds limit of {max_bytes // (1024 * 1024)} MB"
        )
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared and declared not in PDF_CONTENT_TYPES and declared != "application/octet-stream":
        raise ValidationError("Only PDF files are allowed")
    if not declared and not filename.lower().endswith(".pdf") and not data.startswith(b"%PDF-"):
        raise ValidationError("Only PDF files are allowed")
    return watermarker.inspect(data)


async def release_blob(object_store: ObjectStore, handle: str) -> None:
    """Delete a blob that no row references any more. Failures are logged, not raised."""
    try:
        await object_store.delete(handle)
    except NotFound:
        pass
    except StorageUnavailable:
        logger.warning("Could not release storage handle %s; blob is orphaned", handle, exc_info=True)
