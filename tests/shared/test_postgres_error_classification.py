"""Tests for Postgres exception classification into shared error taxonomy."""

from __future__ import annotations

import pytest
from sqlalchemy import exc as sa_exc

from packages.cloudtrace_shared.errors import ErrorCategory, codes
from resources.substrates.postgres.errors import (
    TRANSIENT_SQLSTATES,
    classify_postgres_error,
    extract_sqlstate,
)


class _AsyncpgStyleError(Exception):
    """Synthetic driver exception exposing ``sqlstate`` like asyncpg."""

    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def _wrapped(cls: type[sa_exc.DBAPIError], message: str, sqlstate: str, **kwargs):
    return cls("INSERT INTO request_logs ...", {}, _AsyncpgStyleError(message, sqlstate), **kwargs)


def test_unique_violation_maps_to_conflict_already_exists() -> None:
    """SQLSTATE 23505 should classify as a non-retryable collision."""
    error = classify_postgres_error(
        _wrapped(sa_exc.IntegrityError, "unique constraint violated", "23505")
    )

    assert error.category is ErrorCategory.CONFLICT
    assert error.code == codes.ALREADY_EXISTS
    assert error.retryable is False
    assert error.metadata["sqlstate"] == "23505"


def test_duplicate_key_message_without_sqlstate_maps_to_conflict() -> None:
    """Drivers that only report the message should still classify as collision."""

    class _Plain(Exception):
        pass

    error = classify_postgres_error(
        _Plain('duplicate key value violates unique constraint "uq_request_logs_request_id"')
    )

    assert error.code == codes.ALREADY_EXISTS


@pytest.mark.parametrize("sqlstate", sorted(TRANSIENT_SQLSTATES))
def test_transient_sqlstates_are_retryable_dependency_errors(sqlstate: str) -> None:
    """Server restarts and dropped connections should be retried."""
    error = classify_postgres_error(
        _wrapped(sa_exc.OperationalError, "server closed the connection", sqlstate)
    )

    assert error.category is ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True


@pytest.mark.parametrize(
    "orig",
    [
        ConnectionRefusedError("connect call failed"),
        ConnectionResetError("connection reset by peer"),
        TimeoutError("timed out"),
    ],
)
def test_socket_failures_are_retryable(orig: Exception) -> None:
    """Refused, reset and timed-out sockets should be transient."""
    error = classify_postgres_error(
        sa_exc.OperationalError("INSERT", {}, orig)  # type: ignore[arg-type]
    )

    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True


def test_invalidated_connection_is_retryable() -> None:
    """A DBAPI error that invalidated its connection should be transient."""
    error = classify_postgres_error(
        _wrapped(
            sa_exc.DBAPIError,
            "connection is closed",
            "XX000",
            connection_invalidated=True,
        )
    )

    assert error.retryable is True


def test_bare_os_error_raised_before_sqlalchemy_wraps_it_is_retryable() -> None:
    """Connect-time failures can surface unwrapped from the pool."""
    error = classify_postgres_error(ConnectionRefusedError("[Errno 111] refused"))

    assert error.code == codes.DEPENDENCY_UNAVAILABLE


def test_pool_timeout_maps_to_retryable_dependency_timeout() -> None:
    """Pool acquisition timeouts should be transient."""
    error = classify_postgres_error(
        sa_exc.TimeoutError("QueuePool limit of size 10 overflow 0 reached")
    )

    assert error.category is ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_TIMEOUT
    assert error.retryable is True


def test_other_database_errors_are_permanent() -> None:
    """Bad SQL and auth failures should not be retried."""
    syntax = classify_postgres_error(
        _wrapped(sa_exc.ProgrammingError, 'syntax error at or near "VALUES"', "42601")
    )
    auth = classify_postgres_error(
        _wrapped(sa_exc.OperationalError, "password authentication failed", "28P01")
    )

    assert syntax.code == codes.DEPENDENCY_FAILURE
    assert syntax.retryable is False
    assert auth.code == codes.DEPENDENCY_FAILURE
    assert auth.retryable is False


def test_unknown_exception_maps_to_internal() -> None:
    """Unexpected failures should map to internal/unexpected semantics."""
    error = classify_postgres_error(RuntimeError("boom"))

    assert error.category is ErrorCategory.INTERNAL
    assert error.code == codes.UNEXPECTED_EXCEPTION
    assert error.retryable is False


def test_extract_sqlstate_reads_psycopg_style_pgcode_through_cause() -> None:
    """SQLSTATE lookup should follow ``__cause__`` and accept ``pgcode``."""

    class _PsycopgStyle(Exception):
        pgcode = "57P01"

    try:
        try:
            raise _PsycopgStyle("terminating connection due to administrator command")
        except _PsycopgStyle as inner:
            raise RuntimeError("write failed") from inner
    except RuntimeError as outer:
        assert extract_sqlstate(outer) == "57P01"

    assert extract_sqlstate(ValueError("no code")) is None
