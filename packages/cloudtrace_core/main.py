"""Process entrypoint for the CloudTrace HTTP service."""

from __future__ import annotations

from fastapi import APIRouter, FastAPI

from packages.cloudtrace_core.migrations import run_startup_migrations
from packages.cloudtrace_core.startup import build_lifespan
from packages.cloudtrace_shared.config import CloudTraceSettings, load_settings
from packages.cloudtrace_shared.http import (
    build_server,
    create_app,
    install_fault_barrier,
    install_not_found_handler,
)
from packages.cloudtrace_shared.logging import (
    bind_context,
    configure_logging,
    fields,
    get_logger,
)
from resources.substrates.postgres.config import describe_postgres_target
from services.state.request_log.api import register_routes
from services.state.request_log.config import resolve_request_log_settings
from services.state.request_log.data.runtime import RequestLogPostgresRuntime
from services.state.request_log.service import (
    RequestLogService,
    build_request_log_service,
)

_LOGGER = get_logger(__name__)


def build_app(
    *,
    settings: CloudTraceSettings,
    service: RequestLogService,
    runtime: RequestLogPostgresRuntime,
) -> FastAPI:
    """Assemble the FastAPI app with routes, fault barrier, and lifecycle."""
    app = create_app(
        title="CloudTrace",
        lifespan=build_lifespan(service=service, dispose=runtime.dispose),
    )
    install_fault_barrier(app, logger=_LOGGER)
    install_not_found_handler(app)
    router = APIRouter()
    register_routes(
        router=router,
        service=service,
        settings=resolve_request_log_settings(settings),
    )
    app.include_router(router)
    return app


def main() -> None:
    """Load settings, wire the service, and serve until SIGTERM/SIGINT.

    uvicorn stops accepting connections on the signal, waits for in-flight
    requests up to the graceful-shutdown timeout, then runs the lifespan
    teardown that closes the connection pool.
    """
    settings = load_settings()
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )

    if settings.core.run_migrations_on_startup:
        run_startup_migrations(settings=settings)

    runtime = RequestLogPostgresRuntime.from_settings(settings)
    service = build_request_log_service(settings=settings, runtime=runtime)
    hostname = service.server_identity.hostname
    bind_context(**{fields.SERVER_HOSTNAME: hostname})

    app = build_app(settings=settings, service=service, runtime=runtime)
    _LOGGER.info(
        "cloudtrace starting",
        extra={
            "port": settings.http.port,
            "database": describe_postgres_target(settings.postgres),
        },
    )
    server = build_server(
        app,
        host=settings.http.host,
        port=settings.http.port,
        log_level=settings.logging.level,
        graceful_shutdown_timeout_seconds=settings.http.graceful_shutdown_timeout_seconds,
    )
    server.run()
    _LOGGER.info("cloudtrace stopped")


if __name__ == "__main__":
    main()
