"""Concrete Request Log Service implementation."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from packages.cloudtrace_shared.errors import ErrorCategory, ErrorDetail
from packages.cloudtrace_shared.ids import generate_request_id
from packages.cloudtrace_shared.logging import fields, get_logger
from resources.substrates.postgres.errors import classify_postgres_error
from services.state.request_log.config import RequestLogSettings
from services.state.request_log.domain import (
    HealthStatus,
    LogEntry,
    RecordedRequest,
    ServerIdentity,
    WriteOutcome,
    WriteStatus,
)
from services.state.request_log.interfaces import RequestLogRepository
from services.state.request_log.service import RequestLogService

_LOGGER = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _utc_now() -> datetime:
    """Return the current wall-clock time in UTC."""
    return datetime.now(UTC)


class DefaultRequestLogService(RequestLogService):
    """Default request log implementation over an append-only repository."""

    def __init__(
        self,
        *,
        settings: RequestLogSettings,
        identity: ServerIdentity,
        repository: RequestLogRepository,
        sleep: SleepFn = asyncio.sleep,
        id_factory: Callable[[], str] = generate_request_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._settings = settings
        self._identity = identity
        self._repository = repository
        self._sleep = sleep
        self._id_factory = id_factory
        self._clock = clock

    @property
    def server_identity(self) -> ServerIdentity:
        """Return the immutable identity of this process."""
        return self._identity

    async def write_log_entry(self, entry: LogEntry) -> WriteOutcome:
        """Insert one entry, retrying transient failures on the backoff schedule.

        Each attempt is a complete transaction. Collisions and permanent
        failures return after the attempt that produced them; transient
        failures sleep between attempts and give up after ``max_attempts``.
        """
        max_attempts = self._settings.max_attempts
        attempt = 0
        while True:
            attempt += 1
            try:
                await self._repository.insert_entry(entry=entry)
            except Exception as exc:  # noqa: BLE001
                error = classify_postgres_error(exc)
                failure_exc = exc
            else:
                return WriteOutcome(status=WriteStatus.SUCCESS, attempts=attempt)

            log_extra = _attempt_extra(
                entry=entry, attempt=attempt, max_attempts=max_attempts, error=error
            )
            if error.category is ErrorCategory.CONFLICT:
                _LOGGER.warning("request id collision", extra=log_extra)
                return WriteOutcome(
                    status=WriteStatus.COLLISION, attempts=attempt, error=error
                )

            if not error.retryable:
                _LOGGER.error(
                    "log write failed permanently",
                    extra=log_extra,
                    exc_info=(
                        failure_exc if error.category is ErrorCategory.INTERNAL else None
                    ),
                )
                return WriteOutcome(
                    status=WriteStatus.PERMANENT_ERROR, attempts=attempt, error=error
                )

            if attempt >= max_attempts:
                _LOGGER.error("log write retries exhausted", extra=log_extra)
                return WriteOutcome(
                    status=WriteStatus.EXHAUSTED_RETRIES, attempts=attempt, error=error
                )

            delay_ms = self._settings.backoff_delay_ms(attempt)
            _LOGGER.warning(
                "transient log write failure; retrying",
                extra={**log_extra, fields.DELAY_MS: delay_ms},
            )
            await self._sleep(delay_ms / 1000.0)

    async def record_request(self, *, client_address: str) -> RecordedRequest:
        """Log one served request, regenerating the identifier on collision."""
        occurred_at = self._clock()
        entry = self._new_entry(client_address=client_address, occurred_at=occurred_at)
        outcome = await self.write_log_entry(entry)

        regenerations = 0
        while (
            outcome.status is WriteStatus.COLLISION
            and regenerations < self._settings.collision_retries
        ):
            regenerations += 1
            previous_id = entry.request_id
            entry = self._new_entry(
                client_address=client_address, occurred_at=occurred_at
            )
            _LOGGER.info(
                "regenerated request id after collision",
                extra={
                    "previous_request_id": previous_id,
                    fields.REQUEST_ID: entry.request_id,
                },
            )
            outcome = await self.write_log_entry(entry)

        return RecordedRequest(entry=entry, outcome=outcome, regenerations=regenerations)

    async def health(self) -> HealthStatus:
        """Probe the datastore; failures become ``healthy=False``."""
        try:
            healthy = await self._repository.ping()
            detail = "ok" if healthy else "database ping failed"
        except Exception as exc:  # noqa: BLE001
            healthy = False
            detail = f"database probe raised {type(exc).__name__}"
        return HealthStatus(
            healthy=healthy,
            server_hostname=self._identity.hostname,
            checked_at=self._clock(),
            detail=detail,
        )

    def _new_entry(self, *, client_address: str, occurred_at: datetime) -> LogEntry:
        """Build one entry with a freshly generated identifier."""
        return LogEntry(
            request_id=self._id_factory(),
            server_hostname=self._identity.hostname,
            occurred_at=occurred_at,
            client_ip=client_address,
        )


def _attempt_extra(
    *, entry: LogEntry, attempt: int, max_attempts: int, error: ErrorDetail
) -> dict[str, object]:
    """Build structured log fields for one failed write attempt."""
    return {
        fields.REQUEST_ID: entry.request_id,
        fields.ATTEMPT: attempt,
        fields.MAX_ATTEMPTS: max_attempts,
        fields.ERROR_CODE: error.code,
        "error_message": error.message,
    }
