"""Approval status of a document and of a document version."""

from enum import StrEnum


class ApprovalStatus(StrEnum):
    """Review status of a document."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VersionStatus(StrEnum):
    """Review status of a candidate version. Versions are never rejected."""

    PENDING = "pending"
    APPROVED = "approved"
