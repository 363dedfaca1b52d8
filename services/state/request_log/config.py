"""Pydantic settings for Request Log Service behavior."""

from __future__ import annotations

import socket
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.cloudtrace_shared.config import (
    CloudTraceSettings,
    resolve_component_settings,
)
from services.state.request_log.domain import ServerIdentity

COMPONENT_ID = "request_log"
MAX_HOSTNAME_LENGTH = 255


class RequestLogSettings(BaseModel):
    """Request Log Service write-path and routing settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_attempts: int = Field(default=3, gt=0)
    backoff_schedule_ms: tuple[int, ...] = (100, 200, 400)
    collision_retries: int = Field(default=1, ge=0)
    server_hostname: str = ""
    request_paths: tuple[str, ...] = ("/", "/api/request")
    health_path: str = "/health"
    cors_allow_origin: str = "*"
    cors_allow_methods: str = "GET, POST, OPTIONS"
    cors_allow_headers: str = "Content-Type"

    @field_validator("backoff_schedule_ms")
    @classmethod
    def _validate_backoff_schedule(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        """Require at least one non-negative delay."""
        if len(value) == 0:
            raise ValueError("backoff_schedule_ms must contain at least one delay")
        if any(delay < 0 for delay in value):
            raise ValueError("backoff_schedule_ms delays must be >= 0")
        return value

    @field_validator("server_hostname")
    @classmethod
    def _validate_server_hostname(cls, value: str) -> str:
        """Trim the hostname override and bound it to the column width."""
        normalized = value.strip()
        if len(normalized) > MAX_HOSTNAME_LENGTH:
            raise ValueError("server_hostname must be at most 255 characters")
        return normalized

    @field_validator("request_paths")
    @classmethod
    def _validate_request_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Require absolute request paths."""
        if len(value) == 0:
            raise ValueError("request_paths must contain at least one path")
        for path in value:
            if not path.startswith("/"):
                raise ValueError("request_paths entries must start with '/'")
        return value

    @field_validator("health_path")
    @classmethod
    def _validate_health_path(cls, value: str) -> str:
        """Require an absolute health path."""
        normalized = value.strip()
        if not normalized.startswith("/"):
            raise ValueError("health_path must start with '/'")
        return normalized

    @model_validator(mode="after")
    def _validate_distinct_paths(self) -> "RequestLogSettings":
        """Keep the health probe off the log-write routes."""
        if self.health_path in self.request_paths:
            raise ValueError("health_path must not also be a request path")
        return self

    def backoff_delay_ms(self, attempt: int) -> int:
        """Return the delay before retrying after failed ``attempt`` (1-based).

        Attempts past the end of the schedule reuse its last entry.
        """
        index = min(max(attempt, 1), len(self.backoff_schedule_ms)) - 1
        return self.backoff_schedule_ms[index]


def resolve_request_log_settings(settings: CloudTraceSettings) -> RequestLogSettings:
    """Resolve Request Log settings from ``components.request_log``."""
    return resolve_component_settings(
        settings=settings,
        component_id=COMPONENT_ID,
        model=RequestLogSettings,
    )


def resolve_server_identity(
    settings: RequestLogSettings,
    *,
    hostname_fn: Callable[[], str] = socket.gethostname,
) -> ServerIdentity:
    """Capture this process's network name once, honoring the override."""
    hostname = settings.server_hostname or hostname_fn().strip() or "unknown"
    return ServerIdentity(hostname=hostname[:MAX_HOSTNAME_LENGTH])
