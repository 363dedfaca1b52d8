"""Tests for Postgres substrate readiness probes."""

from __future__ import annotations

import asyncio

from packages.cloudtrace_shared.config import PostgresSettings
from resources.substrates.postgres.health import ping
from resources.substrates.postgres.substrate import SharedPostgresSubstrate


class _FakeConnection:
    """Minimal async context-managed connection capturing execute calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, object] | None]] = []
        self.closed = False

    async def __aenter__(self) -> "_FakeConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.closed = True

    async def execute(self, statement, params=None) -> None:
        self.calls.append((str(statement), params))


class _FakeEngine:
    """Minimal async engine double exposing ``connect`` and ``dispose``."""

    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn
        self.disposed = False

    def connect(self) -> _FakeConnection:
        return self._conn

    async def dispose(self) -> None:
        self.disposed = True


class _RefusingEngine:
    """Engine double whose connection attempts are refused."""

    def connect(self):
        raise ConnectionRefusedError("connection refused")


def test_ping_applies_local_statement_timeout_then_selects_one() -> None:
    """Ping should set a transaction-local timeout and run SELECT 1."""
    conn = _FakeConnection()
    engine = _FakeEngine(conn)

    assert asyncio.run(ping(engine, timeout_seconds=1.2)) is True
    assert conn.calls[0] == (
        "SELECT set_config('statement_timeout', :timeout_value, true)",
        {"timeout_value": "1200ms"},
    )
    assert conn.calls[1] == ("SELECT 1", None)
    assert conn.closed is True


def test_ping_returns_false_when_connection_or_query_fails() -> None:
    """Ping should degrade cleanly on probe exceptions."""

    class _FailingConnection(_FakeConnection):
        async def execute(self, statement, params=None) -> None:
            del statement, params
            raise RuntimeError("boom")

    assert asyncio.run(ping(_FakeEngine(_FailingConnection()))) is False
    assert asyncio.run(ping(_RefusingEngine())) is False


def test_substrate_health_reports_ready_and_unready() -> None:
    """Substrate health should wrap ping results in a status payload."""
    settings = PostgresSettings(health_timeout_seconds=2.0)
    ready = SharedPostgresSubstrate(
        settings=settings, engine=_FakeEngine(_FakeConnection())
    )
    unready = SharedPostgresSubstrate(settings=settings, engine=_RefusingEngine())

    ready_status = asyncio.run(ready.health())
    unready_status = asyncio.run(unready.health())

    assert ready_status.ready is True
    assert ready_status.detail == "ok"
    assert unready_status.ready is False
    assert unready_status.detail == "postgres ping failed"


def test_substrate_dispose_closes_engine_pool() -> None:
    """Dispose should release the pooled connections of the owned engine."""
    engine = _FakeEngine(_FakeConnection())
    substrate = SharedPostgresSubstrate(settings=PostgresSettings(), engine=engine)

    asyncio.run(substrate.dispose())

    assert engine.disposed is True
