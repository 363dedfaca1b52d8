"""Shared Postgres substrate primitives for CloudTrace services."""

from resources.substrates.postgres.config import (
    describe_postgres_target,
    resolve_postgres_settings,
    resolve_postgres_url,
)
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.errors import (
    TRANSIENT_SQLSTATES,
    UNIQUE_VIOLATION,
    classify_postgres_error,
    extract_sqlstate,
)
from resources.substrates.postgres.health import ping
from resources.substrates.postgres.session import (
    rollback_quietly,
    transactional_connection,
)
from resources.substrates.postgres.substrate import (
    PostgresHealthStatus,
    PostgresSubstrate,
    SharedPostgresSubstrate,
)

__all__ = [
    "TRANSIENT_SQLSTATES",
    "UNIQUE_VIOLATION",
    "PostgresHealthStatus",
    "PostgresSubstrate",
    "SharedPostgresSubstrate",
    "classify_postgres_error",
    "create_postgres_engine",
    "describe_postgres_target",
    "extract_sqlstate",
    "ping",
    "resolve_postgres_settings",
    "resolve_postgres_url",
    "rollback_quietly",
    "transactional_connection",
]
