"""View log entry."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class ViewLogEntry:
    id: UUID
    viewer_id: str
    document_id: UUID
    viewed_at: datetime
