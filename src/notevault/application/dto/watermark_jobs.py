"""Watermark job payloads as they travel through the queue.

The wire format is camelCase JSON tagged by ``jobKind``. Decoding ignores
unknown fields so producers may add optional fields without breaking
workers that are still running an older release.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

PROVENANCE_JOB = "upload-provenance-stamp"
PRODUCER_JOB = "admin-producer-stamp"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _WatermarkJobBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    storage_handle: str
    document_id: UUID
    enqueued_at: datetime = Field(default_factory=_utcnow)


class ProvenanceStampJob(_WatermarkJobBase):
    """Stamp the uploader's identity into a freshly uploaded master or candidate file."""

    job_kind: Literal["upload-provenance-stamp"] = PROVENANCE_JOB
    stamp_text: str
    version_id: UUID | None = None


class ProducerStampJob(_WatermarkJobBase):
    """Set producer/creator metadata on an admin upload (no visible mark)."""

    job_kind: Literal["admin-producer-stamp"] = PRODUCER_JOB
    producer: str
    creator: str
    stamp_text: str | None = None


WatermarkJob = Annotated[
    ProvenanceStampJob | ProducerStampJob,
    Field(discriminator="job_kind"),
]

_job_adapter: TypeAdapter[WatermarkJob] = TypeAdapter(WatermarkJob)


def encode_job(job: ProvenanceStampJob | ProducerStampJob) -> str:
    """Serialize job to its queue message."""
    return job.model_dump_json(by_alias=True)


def decode_job(raw: str | bytes) -> ProvenanceStampJob | ProducerStampJob:
    """Parse a queue message. Raises pydantic.ValidationError on bad payloads."""
    return _job_adapter.validate_json(raw)
