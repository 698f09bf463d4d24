"""Multipart form helpers for upload endpoints."""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote_to_bytes

import falcon
import falcon.asgi

# RFC 5987: filename*=charset''percent-encoded (two single quotes)
_FILENAME_STAR_RFC5987 = re.compile(r"([\w-]+)''(.+)")


def _decode_filename(raw: str | None) -> str:
    """Decode filename to UTF-8, fixing mojibake when UTF-8 bytes were read as Latin-1."""
    if not raw or not raw.strip():
        return ""
    raw = raw.strip()
    try:
        return raw.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return raw


def _parse_filename_star_from_header(raw_header_value: bytes) -> str | None:
    """Parse Content-Disposition raw value for filename*=charset''percent-encoded (RFC 5987)."""
    if not raw_header_value:
        return None
    decoded = raw_header_value.decode("utf-8", errors="replace")
    idx = decoded.find("filename*=")
    if idx == -1:
        return None
    rest = decoded[idx + len("filename*=") :].strip()
    match = _FILENAME_STAR_RFC5987.match(rest)
    if not match:
        return None
    charset, encoded = match.groups()
    try:
        return unquote_to_bytes(encoded).decode(charset)
    except (ValueError, LookupError):
        return None


def _get_part_filename(part: object) -> str:
    """Filename from part.filename, else filename* from the raw header, else upload.pdf."""
    raw = (getattr(part, "filename", None) or "").strip()
    if not raw:
        headers = getattr(part, "_headers", None)
        if isinstance(headers, dict):
            raw_star = _parse_filename_star_from_header(headers.get(b"content-disposition", b""))
            if raw_star:
                raw = raw_star.strip()
    decoded = _decode_filename(raw) if raw else ""
    return decoded or "upload.pdf"


@dataclass
class UploadedFile:
    data: bytes
    filename: str
    content_type: str | None


@dataclass
class UploadForm:
    fields: dict[str, str] = field(default_factory=dict)
    file: UploadedFile | None = None

    def get(self, *names: str) -> str | None:
        """First non-empty value among ``names`` (camelCase and snake_case spellings)."""
        for name in names:
            value = self.fields.get(name)
            if value is not None and value.strip():
                return value.strip()
        return None


async def read_upload_form(req: falcon.asgi.Request, file_field: str = "file") -> UploadForm:
    """Read a multipart body holding one PDF part plus text fields.

    Raises falcon.HTTPBadRequest if the body is not multipart; size limits
    are enforced by the app's multipart handler.
    """
    if "multipart/form-data" not in (req.content_type or ""):
        raise falcon.HTTPBadRequest(description="multipart/form-data body required")
    form = await req.get_media()
    result = UploadForm()
    async for part in form:
        name = part.name or ""
        if name == file_field:
            data = await part.get_data()
            if data:
                result.file = UploadedFile(
                    data=bytes(data),
                    filename=_get_part_filename(part),
                    content_type=part.content_type,
                )
        elif name:
            result.fields[name] = await part.get_text() or ""
    return result
