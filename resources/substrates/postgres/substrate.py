"""Shared Postgres substrate contract and implementation."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncEngine

from packages.cloudtrace_shared.config import PostgresSettings
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.health import ping


class PostgresHealthStatus(BaseModel):
    """Postgres substrate readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str


class PostgresSubstrate(Protocol):
    """Protocol for shared Postgres substrate operations."""

    @property
    def engine(self) -> AsyncEngine:
        """Return underlying SQLAlchemy async engine."""

    async def health(self) -> PostgresHealthStatus:
        """Probe Postgres substrate readiness."""

    async def dispose(self) -> None:
        """Close every pooled connection."""


class SharedPostgresSubstrate(PostgresSubstrate):
    """Concrete shared Postgres substrate owning the process connection pool."""

    def __init__(
        self, *, settings: PostgresSettings, engine: AsyncEngine | None = None
    ) -> None:
        self._settings = settings
        self._engine = engine if engine is not None else create_postgres_engine(settings)

    @property
    def engine(self) -> AsyncEngine:
        """Return underlying SQLAlchemy async engine."""
        return self._engine

    async def health(self) -> PostgresHealthStatus:
        """Return readiness from a bounded Postgres ping."""
        try:
            ready = await ping(
                self._engine,
                timeout_seconds=self._settings.health_timeout_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            return PostgresHealthStatus(
                ready=False,
                detail=f"postgres health probe failed: {type(exc).__name__}",
            )
        return PostgresHealthStatus(
            ready=ready,
            detail="ok" if ready else "postgres ping failed",
        )

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
