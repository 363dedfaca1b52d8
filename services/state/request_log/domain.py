"""Domain contracts for Request Log Service payloads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.cloudtrace_shared.errors import ErrorDetail
from packages.cloudtrace_shared.ids import REQUEST_ID_LENGTH, is_request_id


class ServerIdentity(BaseModel):
    """Network name of this process, captured once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    hostname: str = Field(min_length=1, max_length=255)


class LogEntry(BaseModel):
    """One durable record of a served request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_id: str = Field(min_length=REQUEST_ID_LENGTH, max_length=REQUEST_ID_LENGTH)
    server_hostname: str = Field(min_length=1, max_length=255)
    occurred_at: datetime
    client_ip: str = Field(min_length=1, max_length=45)

    @field_validator("request_id")
    @classmethod
    def _validate_request_id(cls, value: str) -> str:
        """Require canonical UUID text."""
        if not is_request_id(value):
            raise ValueError("request_id must be a canonical UUID string")
        return value

    @field_validator("occurred_at")
    @classmethod
    def _validate_occurred_at(cls, value: datetime) -> datetime:
        """Normalize timestamps to timezone-aware UTC."""
        if value.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware")
        return value.astimezone(UTC)


class WriteStatus(str, Enum):
    """Terminal outcome of one logical log write."""

    SUCCESS = "success"
    COLLISION = "collision"
    EXHAUSTED_RETRIES = "exhausted_retries"
    PERMANENT_ERROR = "permanent_error"


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    """Tagged result of ``write_log_entry``; never raised as an exception."""

    status: WriteStatus
    attempts: int
    error: ErrorDetail | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the entry is durably committed."""
        return self.status is WriteStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """Final entry and outcome of one handled log-write request."""

    entry: LogEntry
    outcome: WriteOutcome
    regenerations: int = 0


class HealthStatus(BaseModel):
    """Request Log Service and datastore readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    healthy: bool
    server_hostname: str
    checked_at: datetime
    detail: str
