"""Process lifecycle hooks: startup liveness probe and pool teardown."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from fastapi import FastAPI

from packages.cloudtrace_shared.logging import fields, get_logger
from services.state.request_log.domain import HealthStatus
from services.state.request_log.service import RequestLogService

_LOGGER = get_logger(__name__)


async def run_startup_probe(service: RequestLogService) -> HealthStatus:
    """Probe the datastore once and log the result.

    Startup is fail-open: an unreachable database is logged and the process
    keeps going so the health route can report it.
    """
    status = await service.health()
    if status.healthy:
        _LOGGER.info(
            "startup database probe succeeded",
            extra={fields.SERVER_HOSTNAME: status.server_hostname},
        )
    else:
        _LOGGER.warning(
            "startup database probe failed; accepting requests anyway",
            extra={
                fields.SERVER_HOSTNAME: status.server_hostname,
                "detail": status.detail,
            },
        )
    return status


def build_lifespan(
    *,
    service: RequestLogService,
    dispose: Callable[[], Awaitable[None]],
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the app lifespan: probe on startup, release the pool on shutdown."""

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        del app
        await run_startup_probe(service)
        try:
            yield
        finally:
            _LOGGER.info("in-flight requests drained; closing connection pool")
            await dispose()
            _LOGGER.info("connection pool closed")

    return _lifespan
