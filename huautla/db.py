"""
The shared asyncpg pool behind every repository.

huautla only reads, so connection() hands out pooled connections inside a
read-only transaction. Repositories import connection() by name, which is
also the seam tests patch.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import UUID

import asyncpg

from huautla.config import settings

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """
    Open the pool from settings. Call once before the first repository read.

    Raises:
        ConfigError: if the connection settings are incomplete or malformed
    """
    global pool
    settings.validate()
    pool = await asyncpg.create_pool(
        dsn=settings.dsn,
        min_size=settings.pool_min,
        max_size=settings.pool_max,
        command_timeout=settings.command_timeout,
        init=_init_connection,
    )


async def close_pool() -> None:
    """Close the pool if it is open; safe to call twice."""
    global pool
    closing, pool = pool, None
    if closing is not None:
        await closing.close()


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode uuid columns to UUID so merge keys compare equal across queries."""
    await conn.set_type_codec(
        "uuid",
        encoder=str,
        decoder=lambda x: UUID(x),
        schema="pg_catalog",
    )


@asynccontextmanager
async def connection():
    """
    Acquire a pooled connection inside a read transaction.

    Usage:
        async with connection() as conn:
            rows = await conn.fetch("SELECT * FROM events WHERE uuid = $1", event_id)

    Yields:
        asyncpg.Connection
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction(readonly=True):
            yield conn
