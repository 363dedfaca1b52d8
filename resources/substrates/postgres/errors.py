"""Postgres/SQLAlchemy exception classification helpers.

Every failure of a write attempt lands in exactly one bucket:

- conflict (``ALREADY_EXISTS``): unique-key violation; a retry with the same
  values can never succeed, a retry with a fresh key can.
- retryable dependency (``DEPENDENCY_UNAVAILABLE`` / ``DEPENDENCY_TIMEOUT``):
  network blips, server restarts, pool exhaustion.
- non-retryable dependency (``DEPENDENCY_FAILURE``): everything else the
  database rejects, for example bad SQL or failed authentication.
- internal (``UNEXPECTED_EXCEPTION``): a non-database fault in our own code.
"""

from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import exc as sa_exc

from packages.cloudtrace_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
)

UNIQUE_VIOLATION = "23505"

TRANSIENT_SQLSTATES = frozenset(
    {
        "57P01",  # admin_shutdown
        "57P02",  # crash_shutdown
        "57P03",  # cannot_connect_now
        "08001",  # sqlclient_unable_to_establish_sqlconnection
        "08003",  # connection_does_not_exist
        "08004",  # sqlserver_rejected_establishment_of_sqlconnection
        "08006",  # connection_failure
        "08007",  # transaction_resolution_unknown
    }
)

_TRANSIENT_OS_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
)


def classify_postgres_error(exc: BaseException) -> ErrorDetail:
    """Map one low-level DB exception into shared structured error semantics."""
    message = str(exc)
    sqlstate = extract_sqlstate(exc)
    metadata = {"exception_type": type(exc).__name__}
    if sqlstate is not None:
        metadata["sqlstate"] = sqlstate

    if isinstance(exc, sa_exc.TimeoutError):
        return dependency_error(
            "connection pool exhausted",
            code=codes.DEPENDENCY_TIMEOUT,
            retryable=True,
            metadata=metadata,
        )

    if sqlstate == UNIQUE_VIOLATION or "duplicate key" in message:
        return conflict_error(
            "request id already exists",
            code=codes.ALREADY_EXISTS,
            metadata=metadata,
        )

    if sqlstate in TRANSIENT_SQLSTATES or _is_connection_failure(exc):
        return dependency_error(
            f"postgres unavailable: {_first_line(message)}",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, sa_exc.SQLAlchemyError):
        return dependency_error(
            f"postgres request failed: {_first_line(message)}",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        f"unexpected failure: {_first_line(message)}",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )


def extract_sqlstate(exc: BaseException) -> str | None:
    """Return the first SQLSTATE code found on the exception chain."""
    for candidate in _exception_chain(exc):
        for attribute in ("sqlstate", "pgcode"):
            value = getattr(candidate, attribute, None)
            if isinstance(value, str) and value:
                return value
    return None


def _is_connection_failure(exc: BaseException) -> bool:
    """Return whether the chain shows a dropped, refused or timed-out socket."""
    for candidate in _exception_chain(exc):
        if isinstance(candidate, sa_exc.DBAPIError) and candidate.connection_invalidated:
            return True
        if isinstance(candidate, _TRANSIENT_OS_ERRORS):
            return True
    return False


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Walk an exception, its DBAPI ``orig`` and its ``__cause__`` links once each."""
    seen: set[int] = set()
    pending: list[BaseException | None] = [exc]
    while pending:
        candidate = pending.pop(0)
        if candidate is None or id(candidate) in seen:
            continue
        seen.add(id(candidate))
        yield candidate
        orig = getattr(candidate, "orig", None)
        pending.extend(
            [
                orig if isinstance(orig, BaseException) else None,
                candidate.__cause__,
            ]
        )


def _first_line(message: str) -> str:
    """Trim multi-line driver messages to their first line."""
    return message.strip().splitlines()[0] if message.strip() else "no detail"
