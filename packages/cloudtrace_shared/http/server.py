"""Minimal FastAPI and uvicorn helpers for CloudTrace HTTP handling."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse


INTERNAL_ERROR_BODY = "Internal server error"
NOT_FOUND_BODY = "Not found"


def create_app(
    *,
    title: str = "cloudtrace",
    version: str = "0.0.0",
    lifespan: Callable[[FastAPI], Any] | None = None,
) -> FastAPI:
    """Create a FastAPI app with project defaults.

    Interactive docs and the OpenAPI document are disabled so that every path
    stays available to the service's own routing table.
    """
    return FastAPI(
        title=title,
        version=version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )


def install_fault_barrier(app: FastAPI, *, logger: logging.Logger) -> None:
    """Translate any unhandled handler exception into a 500 JSON response."""

    @app.middleware("http")
    async def _fault_barrier(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "request handling failed",
                extra={"http_method": request.method, "http_path": request.url.path},
            )
            return JSONResponse(
                status_code=500,
                content={"error": INTERNAL_ERROR_BODY, "message": str(exc)},
            )


def install_not_found_handler(app: FastAPI) -> None:
    """Answer unmatched paths and unmatched methods with one JSON 404 body.

    Starlette raises 404 when no route matches and 405 when only the method
    differs; both are reported as not found.
    """

    async def _not_found(request: Request, exc: Exception) -> JSONResponse:
        del request, exc
        return JSONResponse(status_code=404, content={"error": NOT_FOUND_BODY})

    app.add_exception_handler(404, _not_found)
    app.add_exception_handler(405, _not_found)


def build_server(
    app: FastAPI,
    *,
    host: str = "0.0.0.0",
    port: int = 3000,
    log_level: str = "info",
    graceful_shutdown_timeout_seconds: float | None = None,
) -> uvicorn.Server:
    """Build one uvicorn server that drains in-flight requests on SIGTERM."""
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level.lower(),
        log_config=None,
        access_log=False,
        timeout_graceful_shutdown=(
            None
            if graceful_shutdown_timeout_seconds is None
            else int(graceful_shutdown_timeout_seconds)
        ),
    )
    return uvicorn.Server(config)


def get_header(request: Request, name: str) -> str | None:
    """Return one stripped header value, or ``None`` when absent or blank."""
    value = request.headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None
