"""Authoritative in-process Python API for Request Log Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.cloudtrace_shared.config import CloudTraceSettings
from services.state.request_log.data.runtime import RequestLogPostgresRuntime
from services.state.request_log.domain import (
    HealthStatus,
    LogEntry,
    RecordedRequest,
    ServerIdentity,
    WriteOutcome,
)


class RequestLogService(ABC):
    """Public API for recording which instance served each request."""

    @property
    @abstractmethod
    def server_identity(self) -> ServerIdentity:
        """Return the immutable identity of this process."""

    @abstractmethod
    async def write_log_entry(self, entry: LogEntry) -> WriteOutcome:
        """Persist one entry with bounded retry and return its terminal outcome."""

    @abstractmethod
    async def record_request(self, *, client_address: str) -> RecordedRequest:
        """Build, persist, and on collision regenerate one request log entry."""

    @abstractmethod
    async def health(self) -> HealthStatus:
        """Return datastore liveness without raising."""


def build_request_log_service(
    *,
    settings: CloudTraceSettings,
    runtime: RequestLogPostgresRuntime | None = None,
) -> RequestLogService:
    """Build default Request Log implementation from typed settings."""
    from services.state.request_log.config import (
        resolve_request_log_settings,
        resolve_server_identity,
    )
    from services.state.request_log.data import PostgresRequestLogRepository
    from services.state.request_log.implementation import DefaultRequestLogService

    service_settings = resolve_request_log_settings(settings)
    return DefaultRequestLogService(
        settings=service_settings,
        identity=resolve_server_identity(service_settings),
        repository=PostgresRequestLogRepository(
            runtime or RequestLogPostgresRuntime.from_settings(settings)
        ),
    )
