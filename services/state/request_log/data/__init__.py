"""Data-layer exports for Request Log Service."""

from services.state.request_log.data.repository import PostgresRequestLogRepository
from services.state.request_log.data.runtime import RequestLogPostgresRuntime

__all__ = ["PostgresRequestLogRepository", "RequestLogPostgresRuntime"]
