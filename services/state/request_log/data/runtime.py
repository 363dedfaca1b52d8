"""Request-log-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from packages.cloudtrace_shared.config import CloudTraceSettings
from resources.substrates.postgres import SharedPostgresSubstrate
from resources.substrates.postgres.config import resolve_postgres_settings


@dataclass(frozen=True)
class RequestLogPostgresRuntime:
    """Process-wide handle owning the bounded request-log connection pool."""

    substrate: SharedPostgresSubstrate

    @classmethod
    def from_settings(cls, settings: CloudTraceSettings) -> "RequestLogPostgresRuntime":
        """Build the request-log DB runtime from typed application settings."""
        return cls(
            substrate=SharedPostgresSubstrate(
                settings=resolve_postgres_settings(settings)
            )
        )

    @property
    def engine(self) -> AsyncEngine:
        """Return the pooled async engine."""
        return self.substrate.engine

    async def is_healthy(self) -> bool:
        """Return ``True`` when backing Postgres connection is reachable."""
        status = await self.substrate.health()
        return status.ready

    async def dispose(self) -> None:
        """Release every pooled connection."""
        await self.substrate.dispose()
