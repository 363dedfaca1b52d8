"""Request Log Service native package exports."""

from packages.cloudtrace_shared.errors import ErrorCategory, ErrorDetail
from services.state.request_log.config import RequestLogSettings
from services.state.request_log.domain import (
    HealthStatus,
    LogEntry,
    RecordedRequest,
    ServerIdentity,
    WriteOutcome,
    WriteStatus,
)
from services.state.request_log.implementation import DefaultRequestLogService
from services.state.request_log.service import (
    RequestLogService,
    build_request_log_service,
)

__all__ = [
    "DefaultRequestLogService",
    "ErrorCategory",
    "ErrorDetail",
    "HealthStatus",
    "LogEntry",
    "RecordedRequest",
    "RequestLogService",
    "RequestLogSettings",
    "ServerIdentity",
    "WriteOutcome",
    "WriteStatus",
    "build_request_log_service",
]
