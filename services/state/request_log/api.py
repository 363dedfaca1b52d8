"""HTTP route registration for Request Log Service."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from packages.cloudtrace_shared.http import get_header
from packages.cloudtrace_shared.logging import fields, get_logger, log_context
from services.state.request_log.config import RequestLogSettings
from services.state.request_log.domain import RecordedRequest, WriteStatus
from services.state.request_log.service import RequestLogService

_LOGGER = get_logger(__name__)

_FORWARDED_FOR_HEADER = "X-Forwarded-For"
_MAX_CLIENT_ADDRESS_LENGTH = 45
_UNKNOWN_CLIENT = "unknown"


def register_routes(
    *,
    router: APIRouter,
    service: RequestLogService,
    settings: RequestLogSettings,
) -> None:
    """Register health, log-write, and preflight routes.

    The preflight catch-all is added last so the explicit paths always win.
    Unmatched requests are answered by the app-level not-found handler.
    """
    cors_headers = cors_headers_for(settings)
    origin_header = {"Access-Control-Allow-Origin": settings.cors_allow_origin}

    async def handle_health() -> JSONResponse:
        status = await service.health()
        return JSONResponse(
            status_code=200 if status.healthy else 503,
            content={
                "status": "healthy" if status.healthy else "unhealthy",
                "server_hostname": status.server_hostname,
                "timestamp": format_timestamp(status.checked_at),
                "database": "connected" if status.healthy else "disconnected",
            },
            headers=origin_header,
        )

    async def handle_request(request: Request) -> JSONResponse:
        client_address = extract_client_address(request)
        with log_context(
            {
                fields.CLIENT_IP: client_address,
                fields.HTTP_METHOD: request.method,
                fields.HTTP_PATH: request.url.path,
            }
        ):
            recorded = await service.record_request(client_address=client_address)
            _LOGGER.info(
                "request handled",
                extra={
                    fields.REQUEST_ID: recorded.entry.request_id,
                    fields.OUTCOME: recorded.outcome.status.value,
                    fields.ATTEMPT: recorded.outcome.attempts,
                    fields.REGENERATIONS: recorded.regenerations,
                },
            )
        return JSONResponse(
            status_code=200,
            content=recorded_request_payload(recorded),
            headers=cors_headers,
        )

    async def handle_preflight(path: str) -> Response:
        del path
        return Response(status_code=200, headers=cors_headers)

    router.add_api_route(settings.health_path, handle_health, methods=["GET"])
    for path in settings.request_paths:
        router.add_api_route(path, handle_request, methods=["GET", "POST"])
    router.add_api_route("/{path:path}", handle_preflight, methods=["OPTIONS"])


def cors_headers_for(settings: RequestLogSettings) -> dict[str, str]:
    """Return the three CORS headers carried by preflight and write responses."""
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": settings.cors_allow_methods,
        "Access-Control-Allow-Headers": settings.cors_allow_headers,
    }


def extract_client_address(request: Request) -> str:
    """Return the first ``X-Forwarded-For`` hop, else the peer, else ``unknown``."""
    forwarded = get_header(request, _FORWARDED_FOR_HEADER)
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop[:_MAX_CLIENT_ADDRESS_LENGTH]
    if request.client is not None and request.client.host:
        return request.client.host[:_MAX_CLIENT_ADDRESS_LENGTH]
    return _UNKNOWN_CLIENT


def format_timestamp(value: datetime) -> str:
    """Render a UTC ISO-8601 timestamp with milliseconds and a ``Z`` suffix."""
    rendered = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def recorded_request_payload(recorded: RecordedRequest) -> dict[str, object]:
    """Convert one recorded request into its HTTP JSON body."""
    entry = recorded.entry
    outcome = recorded.outcome
    payload: dict[str, object] = {
        "request_id": entry.request_id,
        "server_hostname": entry.server_hostname,
        "timestamp": format_timestamp(entry.occurred_at),
        "client_ip": entry.client_ip,
        "db_status": "success" if outcome.succeeded else "failed",
    }
    if not outcome.succeeded:
        payload["db_error"] = (
            outcome.error.message
            if outcome.error is not None
            else _status_message(outcome.status)
        )
    return payload


def _status_message(status: WriteStatus) -> str:
    """Fallback error text when a failed outcome carries no detail."""
    return status.value.replace("_", " ")
