"""Repository for page, page version and storefront tenant operations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID, uuid4

import asyncpg

from backend.db import system_conn, tenant_conn
from pagebuilder.kernel.errors import DuplicateSlug, VersionConflict
from pagebuilder.kernel.storage import PageStorage, PageTransaction
from pagebuilder.kernel.types import Page, PageChanges, PageVersion, Tenant

PAGE_SLUG_CONSTRAINT = "pages_tenant_slug_key"
PAGE_VERSION_CONSTRAINT = "page_versions_page_version_key"


def _row_to_page(row: asyncpg.Record) -> Page:
    """Convert a database row to a Page."""
    return Page(
        id=row["id"],
        tenant_id=row["tenant_id"],
        slug=row["slug"],
        title=row["title"],
        blocks=row["blocks"] or [],
        is_published=row["is_published"],
        seo_settings=row["seo_settings"] or {},
        meta_description=row["meta_description"] or "",
        theme_id=row["theme_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        published_at=row["published_at"],
    )


def _row_to_version(row: asyncpg.Record) -> PageVersion:
    """Convert a database row to a PageVersion."""
    return PageVersion(
        page_id=row["page_id"],
        version_number=row["version_number"],
        blocks_snapshot=row["blocks_snapshot"] or [],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


class _PostgresPageTransaction(PageTransaction):
    """Page operations on one open tenant_conn() transaction."""

    def __init__(self, conn: asyncpg.Connection, tenant_id: UUID):
        self._conn = conn
        self._tenant_id = tenant_id

    async def get_page(self, page_id: UUID) -> Page | None:
        # Row lock: concurrent updates of the same page queue here.
        row = await self._conn.fetchrow(
            "SELECT * FROM pages WHERE id = $1 AND tenant_id = $2 FOR UPDATE",
            page_id,
            self._tenant_id,
        )
        return _row_to_page(row) if row else None

    async def max_version_number(self, page_id: UUID) -> int:
        return await self._conn.fetchval(
            "SELECT COALESCE(MAX(version_number), 0) FROM page_versions WHERE page_id = $1",
            page_id,
        )

    async def insert_version(self, version: PageVersion) -> PageVersion:
        try:
            row = await self._conn.fetchrow(
                """
                INSERT INTO page_versions (page_id, version_number, blocks_snapshot, created_by, created_at)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                version.page_id,
                version.version_number,
                version.blocks_snapshot,
                version.created_by,
                version.created_at,
            )
        except asyncpg.UniqueViolationError as e:
            if e.constraint_name == PAGE_VERSION_CONSTRAINT:
                raise VersionConflict(version.page_id, version.version_number) from e
            raise
        return _row_to_version(row)

    async def update_page(self, page_id: UUID, changes: PageChanges) -> Page | None:
        try:
            row = await self._conn.fetchrow(
                """
                UPDATE pages SET
                    slug = COALESCE($3, slug),
                    title = COALESCE($4, title),
                    meta_description = COALESCE($5, meta_description),
                    theme_id = COALESCE($6, theme_id),
                    blocks = COALESCE($7, blocks),
                    is_published = COALESCE($8, is_published),
                    seo_settings = COALESCE($9, seo_settings),
                    published_at = CASE
                        WHEN $8 = true AND published_at IS NULL THEN now()
                        ELSE published_at
                    END,
                    updated_at = now()
                WHERE id = $1 AND tenant_id = $2
                RETURNING *
                """,
                page_id,
                self._tenant_id,
                changes.slug,
                changes.title,
                changes.meta_description,
                changes.theme_id,
                changes.blocks,
                changes.is_published,
                changes.seo_settings,
            )
        except asyncpg.UniqueViolationError as e:
            if e.constraint_name == PAGE_SLUG_CONSTRAINT:
                raise DuplicateSlug(changes.slug) from e
            raise
        return _row_to_page(row) if row else None


class PageRepo(PageStorage):
    """All page-related database operations."""

    @asynccontextmanager
    async def transaction(self, tenant_id: UUID) -> AsyncIterator[PageTransaction]:
        """
        One database transaction for a versioned update. Commits on clean
        exit, rolls back on any exception (VersionConflict included).
        """
        async with tenant_conn(tenant_id) as conn:
            yield _PostgresPageTransaction(conn, tenant_id)

    async def create_page(
        self,
        tenant_id: UUID,
        slug: str,
        title: str,
        blocks: list[dict[str, Any]] | None = None,
        meta_description: str = "",
        theme_id: UUID | None = None,
        seo_settings: dict[str, Any] | None = None,
        is_published: bool = False,
    ) -> Page:
        """
        Create a page for a tenant.

        Returns:
            Newly created Page

        Raises:
            DuplicateSlug: If the tenant already has a page with this slug
        """
        async with tenant_conn(tenant_id) as conn:
            try:
                row = await conn.fetchrow(
                    """
                    INSERT INTO pages (
                        id, tenant_id, slug, title, blocks, meta_description,
                        theme_id, seo_settings, is_published, published_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, CASE WHEN $9 THEN now() END)
                    RETURNING *
                    """,
                    uuid4(),
                    tenant_id,
                    slug,
                    title,
                    blocks or [],
                    meta_description,
                    theme_id,
                    seo_settings or {},
                    is_published,
                )
            except asyncpg.UniqueViolationError as e:
                if e.constraint_name == PAGE_SLUG_CONSTRAINT:
                    raise DuplicateSlug(slug) from e
                raise
            return _row_to_page(row)

    async def get_page(self, tenant_id: UUID, page_id: UUID) -> Page | None:
        """
        Get a page by ID. RLS ensures only the owning tenant can access.

        Returns:
            Page if found, None otherwise
        """
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow(
                "SELECT * FROM pages WHERE id = $1 AND tenant_id = $2",
                page_id,
                tenant_id,
            )
            return _row_to_page(row) if row else None

    async def list_pages(self, tenant_id: UUID) -> list[Page]:
        async with tenant_conn(tenant_id) as conn:
            rows = await conn.fetch(
                "SELECT * FROM pages WHERE tenant_id = $1 ORDER BY created_at DESC",
                tenant_id,
            )
            return [_row_to_page(row) for row in rows]

    async def delete_page(self, tenant_id: UUID, page_id: UUID) -> bool:
        """
        Delete a page. Its versions go with it (ON DELETE CASCADE).

        Returns:
            True if deleted, False if not found
        """
        async with tenant_conn(tenant_id) as conn:
            result = await conn.execute(
                "DELETE FROM pages WHERE id = $1 AND tenant_id = $2",
                page_id,
                tenant_id,
            )
            return result == "DELETE 1"

    async def get_published_page(self, tenant_id: UUID, slug: str) -> Page | None:
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow(
                "SELECT * FROM pages WHERE tenant_id = $1 AND slug = $2 AND is_published = true",
                tenant_id,
                slug,
            )
            return _row_to_page(row) if row else None

    async def list_versions(self, tenant_id: UUID, page_id: UUID) -> list[PageVersion]:
        """Version history of a page, oldest first. Empty if the page is not the tenant's."""
        async with tenant_conn(tenant_id) as conn:
            rows = await conn.fetch(
                """
                SELECT v.* FROM page_versions v
                JOIN pages p ON p.id = v.page_id
                WHERE v.page_id = $1 AND p.tenant_id = $2
                ORDER BY v.version_number
                """,
                page_id,
                tenant_id,
            )
            return [_row_to_version(row) for row in rows]

    async def get_version(self, tenant_id: UUID, page_id: UUID, version_number: int) -> PageVersion | None:
        async with tenant_conn(tenant_id) as conn:
            row = await conn.fetchrow(
                """
                SELECT v.* FROM page_versions v
                JOIN pages p ON p.id = v.page_id
                WHERE v.page_id = $1 AND p.tenant_id = $2 AND v.version_number = $3
                """,
                page_id,
                tenant_id,
                version_number,
            )
            return _row_to_version(row) if row else None

    async def get_tenant_by_subdomain(self, subdomain: str) -> Tenant | None:
        """
        Resolve a storefront subdomain. Uses system_conn because the caller
        is an anonymous storefront visitor.
        """
        async with system_conn() as conn:
            row = await conn.fetchrow(
                "SELECT id, subdomain, store_name FROM tenants WHERE subdomain = $1",
                subdomain,
            )
            if not row:
                return None
            return Tenant(id=row["id"], subdomain=row["subdomain"], store_name=row["store_name"] or "")
