"""SQLAlchemy async engine construction for the shared Postgres substrate."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from packages.cloudtrace_shared.config import PostgresSettings
from resources.substrates.postgres.config import resolve_postgres_url


def create_postgres_engine(config: PostgresSettings) -> AsyncEngine:
    """Construct a pooled async engine using asyncpg.

    The pool is hard-capped at ``pool_size + max_overflow`` connections;
    checkouts beyond the cap wait ``pool_timeout_seconds`` and then raise
    ``sqlalchemy.exc.TimeoutError``.
    """
    statement_timeout_ms = max(1, int(config.statement_timeout_seconds * 1000))
    connect_args = {
        "timeout": config.connect_timeout_seconds,
        "command_timeout": config.statement_timeout_seconds,
        "ssl": config.sslmode,
        "server_settings": {"statement_timeout": str(statement_timeout_ms)},
    }
    return create_async_engine(
        resolve_postgres_url(config),
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_recycle=config.pool_recycle_seconds,
        pool_pre_ping=config.pool_pre_ping,
        connect_args=connect_args,
    )
