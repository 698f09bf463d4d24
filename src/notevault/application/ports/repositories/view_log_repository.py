"""View log repository port."""

from typing import Protocol

from notevault.domain.entities import ViewLogEntry


class ViewLogRepository(Protocol):
    """Port for recording document views."""

    async def record(self, entry: ViewLogEntry) -> None: ...
