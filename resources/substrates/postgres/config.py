"""Configuration helpers for shared Postgres substrate access."""

from __future__ import annotations

from urllib.parse import quote_plus

from packages.cloudtrace_shared.config import CloudTraceSettings, PostgresSettings

ASYNC_DRIVER_SCHEME = "postgresql+asyncpg://"
_SYNC_SCHEMES = ("postgresql://", "postgres://", "postgresql+psycopg://")


def resolve_postgres_settings(settings: CloudTraceSettings) -> PostgresSettings:
    """Return the Postgres subtree of root runtime settings."""
    return settings.postgres


def resolve_postgres_url(config: PostgresSettings) -> str:
    """Return an asyncpg SQLAlchemy URL for the configured datastore."""
    url = config.url.strip()
    if not url:
        return _build_url_from_parts(config)
    for scheme in _SYNC_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_DRIVER_SCHEME + url[len(scheme) :]
    return url


def describe_postgres_target(config: PostgresSettings) -> str:
    """Return a credential-free ``host:port/database`` label for logs."""
    return f"{config.host}:{config.port}/{config.database}"


def _build_url_from_parts(config: PostgresSettings) -> str:
    """Construct SQLAlchemy asyncpg URL from split config values."""
    return (
        ASYNC_DRIVER_SCHEME
        + f"{quote_plus(config.user)}:{quote_plus(config.password)}"
        + f"@{config.host}:{config.port}/{quote_plus(config.database)}"
    )
