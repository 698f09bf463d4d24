"""Material classification for uploaded notes."""

from enum import StrEnum


class MaterialType(StrEnum):
    """Where the material comes from."""

    PERSONAL = "personal"
    UNIVERSITY = "university"
