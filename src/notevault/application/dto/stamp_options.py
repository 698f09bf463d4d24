"""Watermark stamp parameters."""

from dataclasses import dataclass
from enum import StrEnum


class StampKind(StrEnum):
    """Which mark is being applied. Re-stamping replaces marks of the same kind."""

    PROVENANCE = "provenance"
    VIEWER = "viewer"
    PRODUCER = "producer"


class StampPlacement(StrEnum):
    CENTER = "center"
    FOOTER = "footer"


@dataclass(frozen=True)
class StampOptions:
    """Everything the watermark engine needs besides the source bytes."""

    kind: StampKind
    visible_text: str | None = None
    text_opacity: float = 0.12
    text_rotation_degrees: float = 0.0
    font_name: str = "Helvetica-Bold"
    font_size: float = 42.0
    text_color: tuple[float, float, float] = (0.5, 0.5, 0.5)
    placement: StampPlacement = StampPlacement.CENTER
    logo_bytes: bytes | None = None
    logo_opacity: float = 0.16
    logo_corner_margin: float = 20.0
    logo_scale: float = 0.15
    skip_if_owner_or_admin: bool = False
    producer: str | None = None
    creator: str | None = None


@dataclass(frozen=True)
class StampIdentity:
    """Who the stamped copy is for, checked against ``skip_if_owner_or_admin``."""

    viewer_id: str
    owner_id: str
    is_elevated: bool = False

    @property
    def sees_clean_copy(self) -> bool:
        return self.is_elevated or self.viewer_id == self.owner_id


def provenance_text(uploader_username: str, brand_name: str) -> str:
    return f"Uploaded by {uploader_username} on {brand_name}"


def provenance_options(text: str) -> StampOptions:
    """Small gray footer naming the uploader, applied once by the worker."""
    return StampOptions(
        kind=StampKind.PROVENANCE,
        visible_text=text,
        text_opacity=0.6,
        font_name="Helvetica",
        font_size=10.0,
        text_color=(0.5, 0.5, 0.5),
        placement=StampPlacement.FOOTER,
    )


def viewer_options(viewer_username: str, logo_bytes: bytes | None = None) -> StampOptions:
    """Large diagonal mark naming the reader, rendered on every view."""
    return StampOptions(
        kind=StampKind.VIEWER,
        visible_text=f"Viewed by {viewer_username}",
        text_opacity=0.12,
        text_rotation_degrees=-45.0,
        font_name="Helvetica-Bold",
        font_size=42.0,
        text_color=(0.8, 0.2, 0.2),
        placement=StampPlacement.CENTER,
        logo_bytes=logo_bytes,
        logo_opacity=0.16,
        logo_corner_margin=20.0,
        skip_if_owner_or_admin=True,
    )


def producer_options(producer: str, creator: str) -> StampOptions:
    """Metadata-only stamp for admin uploads."""
    return StampOptions(kind=StampKind.PRODUCER, producer=producer, creator=creator)
