"""Transport-neutral protocol interfaces used by Request Log Service."""

from __future__ import annotations

from typing import Protocol

from services.state.request_log.domain import LogEntry


class RequestLogRepository(Protocol):
    """Protocol for append-only request log persistence."""

    async def insert_entry(self, *, entry: LogEntry) -> None:
        """Insert one entry in its own transaction; raise on any failure."""

    async def ping(self) -> bool:
        """Return whether the datastore answers a trivial query."""
