"""Storage key naming shared by the object store adapters."""

import re
import secrets
from datetime import UTC, datetime
from pathlib import PurePosixPath

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_stem(filename: str, max_length: int = 80) -> str:
    stem = PurePosixPath(filename.replace("\\", "/")).stem
    cleaned = _UNSAFE.sub("_", stem).strip("._")
    return cleaned[:max_length] or "document"


def build_object_key(prefix: str, owner_id: str, filename: str) -> str:
    """``{prefix}/{owner}_{timestamp}_{random}_{stem}.pdf``"""
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
    owner = _UNSAFE.sub("_", owner_id) or "anonymous"
    name = f"{owner}_{timestamp}_{secrets.token_hex(4)}_{safe_stem(filename)}.pdf"
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name
