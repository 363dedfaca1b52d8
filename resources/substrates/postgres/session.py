"""Scoped connection helpers for shared Postgres substrate access."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction

from packages.cloudtrace_shared.logging import get_logger

_LOGGER = get_logger(__name__)


@asynccontextmanager
async def transactional_connection(
    engine: AsyncEngine,
) -> AsyncIterator[AsyncConnection]:
    """Yield one pooled connection inside a transaction.

    The transaction commits when the block exits cleanly and rolls back on any
    error. The connection goes back to the pool on every exit path.
    """
    async with engine.connect() as connection:
        transaction = await connection.begin()
        try:
            yield connection
            await transaction.commit()
        except Exception:
            await rollback_quietly(transaction)
            raise


async def rollback_quietly(transaction: AsyncTransaction) -> None:
    """Roll back one transaction, logging instead of raising rollback errors."""
    try:
        await transaction.rollback()
    except Exception:  # noqa: BLE001
        _LOGGER.warning("transaction rollback failed", exc_info=True)
