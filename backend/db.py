"""
Database connection pool and RLS-scoped connection managers.

All database access goes through tenant_conn() or system_conn().
Never use pool.acquire() directly outside this module.

Driver and connection failures leaving either context manager are raised as
PersistenceError. Repos translate the unique violations they expect before
that happens.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from uuid import UUID

import asyncpg

from backend import config
from pagebuilder.kernel.errors import PersistenceError

pool: asyncpg.Pool | None = None

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


async def init_pool() -> None:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    pool = await asyncpg.create_pool(
        dsn=config.settings.DATABASE_URL,
        min_size=config.settings.DB_POOL_MIN_SIZE,
        max_size=config.settings.DB_POOL_MAX_SIZE,
        command_timeout=60,
        init=_init_connection,
    )


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    Sets up type codecs for UUID and JSON handling.
    """
    await conn.set_type_codec(
        "uuid",
        encoder=str,
        decoder=lambda x: UUID(x),
        schema="pg_catalog",
    )
    # JSONB codec - decode to Python dict/list
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )
    await conn.set_type_codec(
        "json",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


@asynccontextmanager
async def tenant_conn(tenant_id: str | UUID):
    """
    Acquire a transactional connection scoped to one tenant via RLS.

    Every query through this connection can only see/modify rows
    belonging to this tenant. Enforced by Postgres RLS policies.
    The transaction commits when the block exits cleanly and rolls
    back on any exception.

    Usage:
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow("SELECT * FROM pages WHERE id = $1", page_id)

    Args:
        tenant_id: UUID of the tenant to scope the connection to

    Yields:
        asyncpg.Connection with RLS context set

    Raises:
        PersistenceError: If the driver or the connection fails
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                # All policies reference current_setting('app.tenant_id')
                await conn.execute(
                    "SELECT set_config('app.tenant_id', $1, true)",
                    str(tenant_id),
                )
                yield conn
    except _DRIVER_ERRORS as e:
        raise PersistenceError(f"Database error: {e}") from e


@asynccontextmanager
async def system_conn():
    """
    Acquire a database connection without tenant scoping.

    For system operations only:
    - Migrations (alembic)
    - Block type registry loads (block_types is global)
    - Storefront tenant lookup by subdomain
    - Test fixtures

    WARNING: Should be rare. If you're using this in a route handler
    that returns tenant data, you're probably doing it wrong.

    Yields:
        asyncpg.Connection without RLS scoping

    Raises:
        PersistenceError: If the driver or the connection fails
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    try:
        async with pool.acquire() as conn:
            async with conn.transaction():
                # RLS policies treat an empty app.tenant_id as a system context.
                await conn.execute("SELECT set_config('app.tenant_id', '', true)")
                yield conn
    except _DRIVER_ERRORS as e:
        raise PersistenceError(f"Database error: {e}") from e
