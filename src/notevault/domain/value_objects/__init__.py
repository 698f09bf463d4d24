"""Domain value objects."""

from notevault.domain.value_objects.approval_status import ApprovalStatus, VersionStatus
from notevault.domain.value_objects.content_hash import ContentHash
from notevault.domain.value_objects.file_reference import FileReference
from notevault.domain.value_objects.material_type import MaterialType

__all__ = [
    "ApprovalStatus",
    "ContentHash",
    "FileReference",
    "MaterialType",
    "VersionStatus",
]
