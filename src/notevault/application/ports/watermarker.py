"""Watermarker port - pure PDF stamping."""

from typing import Protocol

from notevault.application.dto.stamp_options import StampIdentity, StampKind, StampOptions


class Watermarker(Protocol):
    """Pure transform over PDF bytes. Raises MalformedDocument on bad input."""

    def stamp(
        self,
        source: bytes,
        options: StampOptions,
        identity: StampIdentity | None = None,
    ) -> bytes: ...

    def inspect(self, data: bytes) -> int: ...

    def count_stamps(self, data: bytes, kind: StampKind) -> list[int]: ...
