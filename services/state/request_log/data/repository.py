"""Append-only Postgres repository for request log entries."""

from __future__ import annotations

from sqlalchemy import insert

from resources.substrates.postgres import transactional_connection
from services.state.request_log.domain import LogEntry
from services.state.request_log.interfaces import RequestLogRepository

from .runtime import RequestLogPostgresRuntime
from .schema import request_logs


class PostgresRequestLogRepository(RequestLogRepository):
    """SQL repository over the ``request_logs`` table.

    Each call checks one connection out of the runtime pool, runs inside its
    own transaction, and hands the connection back on every exit path.
    Uniqueness of ``request_id`` is left to the table constraint.
    """

    def __init__(self, runtime: RequestLogPostgresRuntime) -> None:
        self._runtime = runtime

    async def insert_entry(self, *, entry: LogEntry) -> None:
        """Insert one row; commit on success, roll back and raise on failure."""
        async with transactional_connection(self._runtime.engine) as conn:
            await conn.execute(
                insert(request_logs).values(
                    request_id=entry.request_id,
                    server_hostname=entry.server_hostname,
                    timestamp=entry.occurred_at,
                    client_ip=entry.client_ip,
                )
            )

    async def ping(self) -> bool:
        """Probe datastore reachability through the same pool."""
        return await self._runtime.is_healthy()
