"""Repository for theme operations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID, uuid4

import asyncpg

from backend.db import tenant_conn
from pagebuilder.kernel.errors import DuplicateThemeName
from pagebuilder.kernel.storage import ThemeStorage, ThemeTransaction
from pagebuilder.kernel.types import Theme

THEME_NAME_CONSTRAINT = "themes_tenant_name_key"


def _row_to_theme(row: asyncpg.Record) -> Theme:
    """Convert a database row to a Theme."""
    return Theme(
        id=row["id"],
        tenant_id=row["tenant_id"],
        name=row["name"],
        settings=row["settings"] or {},
        is_active=row["is_active"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class _PostgresThemeTransaction(ThemeTransaction):
    """Theme operations on one open tenant_conn() transaction holding the tenant's theme lock."""

    def __init__(self, conn: asyncpg.Connection, tenant_id: UUID):
        self._conn = conn
        self._tenant_id = tenant_id

    async def get_theme(self, theme_id: UUID) -> Theme | None:
        row = await self._conn.fetchrow(
            "SELECT * FROM themes WHERE id = $1 AND tenant_id = $2",
            theme_id,
            self._tenant_id,
        )
        return _row_to_theme(row) if row else None

    async def insert_theme(self, name: str, settings: dict[str, Any], is_active: bool) -> Theme:
        try:
            row = await self._conn.fetchrow(
                """
                INSERT INTO themes (id, tenant_id, name, settings, is_active)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                uuid4(),
                self._tenant_id,
                name,
                settings,
                is_active,
            )
        except asyncpg.UniqueViolationError as e:
            if e.constraint_name == THEME_NAME_CONSTRAINT:
                raise DuplicateThemeName(name) from e
            raise
        return _row_to_theme(row)

    async def deactivate_all(self) -> None:
        await self._conn.execute(
            "UPDATE themes SET is_active = false, updated_at = now() WHERE tenant_id = $1 AND is_active",
            self._tenant_id,
        )

    async def update_theme(
        self,
        theme_id: UUID,
        name: str | None = None,
        settings: dict[str, Any] | None = None,
        is_active: bool | None = None,
    ) -> Theme | None:
        try:
            row = await self._conn.fetchrow(
                """
                UPDATE themes SET
                    name = COALESCE($3, name),
                    settings = COALESCE($4, settings),
                    is_active = COALESCE($5, is_active),
                    updated_at = now()
                WHERE id = $1 AND tenant_id = $2
                RETURNING *
                """,
                theme_id,
                self._tenant_id,
                name,
                settings,
                is_active,
            )
        except asyncpg.UniqueViolationError as e:
            if e.constraint_name == THEME_NAME_CONSTRAINT:
                raise DuplicateThemeName(name) from e
            raise
        return _row_to_theme(row) if row else None


class ThemeRepo(ThemeStorage):
    """All theme-related database operations."""

    @asynccontextmanager
    async def theme_transaction(self, tenant_id: UUID) -> AsyncIterator[ThemeTransaction]:
        """
        Transaction serialized per tenant by a transaction-scoped advisory
        lock. The partial unique index on active themes backs this up.
        """
        async with tenant_conn(tenant_id) as conn:
            await conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", f"themes:{tenant_id}")
            yield _PostgresThemeTransaction(conn, tenant_id)

    async def list_themes(self, tenant_id: UUID) -> list[Theme]:
        async with tenant_conn(tenant_id) as conn:
            rows = await conn.fetch(
                "SELECT * FROM themes WHERE tenant_id = $1 ORDER BY created_at DESC",
                tenant_id,
            )
            return [_row_to_theme(row) for row in rows]

    async def get_theme(self, tenant_id: UUID, theme_id: UUID) -> Theme | None:
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow(
                "SELECT * FROM themes WHERE id = $1 AND tenant_id = $2",
                theme_id,
                tenant_id,
            )
            return _row_to_theme(row) if row else None

    async def get_active_theme(self, tenant_id: UUID) -> Theme | None:
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow(
                "SELECT * FROM themes WHERE tenant_id = $1 AND is_active",
                tenant_id,
            )
            return _row_to_theme(row) if row else None

    async def delete_theme(self, tenant_id: UUID, theme_id: UUID) -> bool:
        """
        Delete a theme. Pages that used it keep rendering without one
        (theme_id ON DELETE SET NULL).

        Returns:
            True if deleted, False if not found
        """
        async with tenant_conn(tenant_id) as conn:
            result = await conn.execute(
                "DELETE FROM themes WHERE id = $1 AND tenant_id = $2",
                theme_id,
                tenant_id,
            )
            return result == "DELETE 1"
