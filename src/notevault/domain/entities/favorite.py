"""Favorite entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class Favorite:
    """User bookmarked a document and wants update notifications."""

    user_id: str
    document_id: UUID
    created_at: datetime
