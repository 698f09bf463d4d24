"""Pointer to a binary held by the object store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileReference:
    """Public URL plus the opaque handle needed to read, overwrite or delete the blob."""

    url: str
    storage_handle: str

    def __post_init__(self) -> None:
        if not self.storage_handle:
            raise ValueError("storage_handle must not be empty")
