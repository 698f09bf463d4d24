"""Content hash of uploaded bytes, kept for traceability."""

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class ContentHash:
    """SHA-256 of the submitted file (hex)."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 64:
            raise ValueError("SHA-256 hex digest must be 64 characters")

    @classmethod
    def of(cls, data: bytes) -> "ContentHash":
        return cls(hashlib.sha256(data).hexdigest())

    def __str__(self) -> str:
        return self.value
