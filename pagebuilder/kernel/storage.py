"""
Page Builder Kernel: Storage Protocol

The kernel talks to persistence only through these interfaces.
Implement with Postgres for production (backend.repos), or in-memory for
tests and local previews (MemoryStorage).

Writes that must be atomic go through a transaction object:
  - PageTransaction: read page, read max version, insert version, update page
  - ThemeTransaction: serialized per tenant, deactivate siblings + activate one

Implementations must enforce uniqueness of (page_id, version_number) and
raise VersionConflict on a duplicate, rolling the whole transaction back.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

from pagebuilder.kernel.errors import DuplicateSlug, DuplicateThemeName, VersionConflict
from pagebuilder.kernel.types import (
    BlockType,
    Page,
    PageChanges,
    PageVersion,
    Tenant,
    Theme,
    now_utc,
)

# ---------------------------------------------------------------------------
# Transaction interfaces
# ---------------------------------------------------------------------------


class PageTransaction:
    """Unit of work for a versioned page update. Commits on clean exit."""

    async def get_page(self, page_id: UUID) -> Page | None:
        """Current page row, or None if the page does not exist."""
        raise NotImplementedError

    async def max_version_number(self, page_id: UUID) -> int:
        """Highest version number recorded for the page, 0 if none."""
        raise NotImplementedError

    async def insert_version(self, version: PageVersion) -> PageVersion:
        """Append a version row. Raises VersionConflict on a duplicate number."""
        raise NotImplementedError

    async def update_page(self, page_id: UUID, changes: PageChanges) -> Page | None:
        """Apply changes; None fields are left unchanged."""
        raise NotImplementedError


class ThemeTransaction:
    """Unit of work on one tenant's themes. Serialized per tenant."""

    async def get_theme(self, theme_id: UUID) -> Theme | None:
        raise NotImplementedError

    async def insert_theme(self, name: str, settings: dict[str, Any], is_active: bool) -> Theme:
        """Raises DuplicateThemeName if the name is taken."""
        raise NotImplementedError

    async def deactivate_all(self) -> None:
        raise NotImplementedError

    async def update_theme(
        self,
        theme_id: UUID,
        name: str | None = None,
        settings: dict[str, Any] | None = None,
        is_active: bool | None = None,
    ) -> Theme | None:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Storage interfaces
# ---------------------------------------------------------------------------


class PageStorage:
    """Pages, their version history, and storefront tenant lookup."""

    def transaction(self, tenant_id: UUID) -> AbstractAsyncContextManager[PageTransaction]:
        raise NotImplementedError

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
        """Raises DuplicateSlug if the tenant already has the slug."""
        raise NotImplementedError

    async def get_page(self, tenant_id: UUID, page_id: UUID) -> Page | None:
        raise NotImplementedError

    async def list_pages(self, tenant_id: UUID) -> list[Page]:
        """All pages for the tenant, newest first."""
        raise NotImplementedError

    async def delete_page(self, tenant_id: UUID, page_id: UUID) -> bool:
        """Delete a page and its versions. False if not found."""
        raise NotImplementedError

    async def get_published_page(self, tenant_id: UUID, slug: str) -> Page | None:
        raise NotImplementedError

    async def list_versions(self, tenant_id: UUID, page_id: UUID) -> list[PageVersion]:
        """Version history, oldest first."""
        raise NotImplementedError

    async def get_version(self, tenant_id: UUID, page_id: UUID, version_number: int) -> PageVersion | None:
        raise NotImplementedError

    async def get_tenant_by_subdomain(self, subdomain: str) -> Tenant | None:
        raise NotImplementedError


class ThemeStorage:
    """Tenant themes. Mutations that touch is_active go through theme_transaction()."""

    def theme_transaction(self, tenant_id: UUID) -> AbstractAsyncContextManager[ThemeTransaction]:
        raise NotImplementedError

    async def list_themes(self, tenant_id: UUID) -> list[Theme]:
        """All themes for the tenant, newest first."""
        raise NotImplementedError

    async def get_theme(self, tenant_id: UUID, theme_id: UUID) -> Theme | None:
        raise NotImplementedError

    async def get_active_theme(self, tenant_id: UUID) -> Theme | None:
        raise NotImplementedError

    async def delete_theme(self, tenant_id: UUID, theme_id: UUID) -> bool:
        raise NotImplementedError


class BlockTypeSource:
    """Where block type rows come from when the registry is (re)built."""

    async def list_block_types(self) -> list[BlockType]:
        """All block type rows, enabled or not."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class _MemoryPageTransaction(PageTransaction):
    """
    Stages writes and applies them at commit. Uniqueness of version numbers
    is checked again at commit, so two transactions that both read the same
    max version cannot both commit.
    """

    def __init__(self, storage: MemoryStorage, tenant_id: UUID):
        self._storage = storage
        self._tenant_id = tenant_id
        self._versions: list[PageVersion] = []
        self._pages: dict[UUID, Page] = {}

    async def get_page(self, page_id: UUID) -> Page | None:
        await asyncio.sleep(0)
        if page_id in self._pages:
            return self._pages[page_id].copy()
        page = self._storage.pages.get(page_id)
        if page is None or page.tenant_id != self._tenant_id:
            return None
        return page.copy()

    async def max_version_number(self, page_id: UUID) -> int:
        await asyncio.sleep(0)
        numbers = [v.version_number for v in self._storage.versions.get(page_id, [])]
        numbers.extend(v.version_number for v in self._versions if v.page_id == page_id)
        return max(numbers, default=0)

    async def insert_version(self, version: PageVersion) -> PageVersion:
        await asyncio.sleep(0)
        if self._storage.has_version(version.page_id, version.version_number) or any(
            v.page_id == version.page_id and v.version_number == version.version_number for v in self._versions
        ):
            raise VersionConflict(version.page_id, version.version_number)
        self._versions.append(version)
        return version

    async def update_page(self, page_id: UUID, changes: PageChanges) -> Page | None:
        current = await self.get_page(page_id)
        if current is None:
            return None
        updates = changes.as_updates()
        if "slug" in updates and self._storage.slug_taken(self._tenant_id, updates["slug"], exclude=page_id):
            raise DuplicateSlug(updates["slug"])
        now = now_utc()
        if updates.get("is_published") and current.published_at is None:
            updates["published_at"] = now
        updated = replace(current, **updates, updated_at=now)
        self._pages[page_id] = updated
        return updated.copy()

    def commit(self) -> None:
        """Apply staged writes. Must not await: runs atomically on the event loop."""
        for version in self._versions:
            if self._storage.has_version(version.page_id, version.version_number):
                raise VersionConflict(version.page_id, version.version_number)
        for page_id, page in self._pages.items():
            stored = self._storage.pages.get(page_id)
            if stored is not None and stored.slug != page.slug:
                if self._storage.slug_taken(self._tenant_id, page.slug, exclude=page_id):
                    raise DuplicateSlug(page.slug)
        for version in self._versions:
            self._storage.versions.setdefault(version.page_id, []).append(version)
        for page_id, page in self._pages.items():
            if page_id in self._storage.pages:
                self._storage.pages[page_id] = page


class _MemoryThemeTransaction(ThemeTransaction):
    """Works on a staged copy of one tenant's themes; commit replaces them."""

    def __init__(self, storage: MemoryStorage, tenant_id: UUID):
        self._storage = storage
        self._tenant_id = tenant_id
        self._themes: dict[UUID, Theme] = {
            t.id: t.copy() for t in storage.themes.values() if t.tenant_id == tenant_id
        }

    async def get_theme(self, theme_id: UUID) -> Theme | None:
        await asyncio.sleep(0)
        theme = self._themes.get(theme_id)
        return theme.copy() if theme else None

    async def insert_theme(self, name: str, settings: dict[str, Any], is_active: bool) -> Theme:
        await asyncio.sleep(0)
        if any(t.name == name for t in self._themes.values()):
            raise DuplicateThemeName(name)
        theme = Theme(id=uuid4(), tenant_id=self._tenant_id, name=name, settings=dict(settings), is_active=is_active)
        self._themes[theme.id] = theme
        return theme.copy()

    async def deactivate_all(self) -> None:
        await asyncio.sleep(0)
        for theme_id, theme in self._themes.items():
            if theme.is_active:
                self._themes[theme_id] = replace(theme, is_active=False, updated_at=now_utc())

    async def update_theme(
        self,
        theme_id: UUID,
        name: str | None = None,
        settings: dict[str, Any] | None = None,
        is_active: bool | None = None,
    ) -> Theme | None:
        await asyncio.sleep(0)
        theme = self._themes.get(theme_id)
        if theme is None:
            return None
        if name is not None and any(t.name == name and t.id != theme_id for t in self._themes.values()):
            raise DuplicateThemeName(name)
        updated = replace(
            theme,
            name=name if name is not None else theme.name,
            settings=dict(settings) if settings is not None else theme.settings,
            is_active=is_active if is_active is not None else theme.is_active,
            updated_at=now_utc(),
        )
        self._themes[theme_id] = updated
        return updated.copy()

    def commit(self) -> None:
        for theme_id in [t.id for t in self._storage.themes.values() if t.tenant_id == self._tenant_id]:
            del self._storage.themes[theme_id]
        self._storage.themes.update(self._themes)


class MemoryStorage(PageStorage, ThemeStorage, BlockTypeSource):
    """In-memory storage for tests and local previews."""

    def __init__(self, block_types: list[BlockType] | None = None) -> None:
        self.pages: dict[UUID, Page] = {}
        self.versions: dict[UUID, list[PageVersion]] = {}
        self.themes: dict[UUID, Theme] = {}
        self.tenants: dict[UUID, Tenant] = {}
        self.block_types: list[BlockType] = list(block_types or [])
        self._theme_locks: dict[UUID, asyncio.Lock] = {}

    # -- helpers --

    def add_tenant(self, subdomain: str, store_name: str = "", tenant_id: UUID | None = None) -> Tenant:
        tenant = Tenant(id=tenant_id or uuid4(), subdomain=subdomain, store_name=store_name)
        self.tenants[tenant.id] = tenant
        return tenant

    def has_version(self, page_id: UUID, version_number: int) -> bool:
        return any(v.version_number == version_number for v in self.versions.get(page_id, []))

    def slug_taken(self, tenant_id: UUID, slug: str, exclude: UUID | None = None) -> bool:
        return any(p.tenant_id == tenant_id and p.slug == slug and p.id != exclude for p in self.pages.values())

    def _get_theme_lock(self, tenant_id: UUID) -> asyncio.Lock:
        """Per-tenant lock standing in for the database's transaction-scoped lock."""
        if tenant_id not in self._theme_locks:
            self._theme_locks[tenant_id] = asyncio.Lock()
        return self._theme_locks[tenant_id]

    # -- transactions --

    @asynccontextmanager
    async def transaction(self, tenant_id: UUID) -> AsyncIterator[PageTransaction]:
        tx = _MemoryPageTransaction(self, tenant_id)
        yield tx
        tx.commit()

    @asynccontextmanager
    async def theme_transaction(self, tenant_id: UUID) -> AsyncIterator[ThemeTransaction]:
        async with self._get_theme_lock(tenant_id):
            tx = _MemoryThemeTransaction(self, tenant_id)
            yield tx
            tx.commit()

    # -- pages --

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
        if self.slug_taken(tenant_id, slug):
            raise DuplicateSlug(slug)
        now = now_utc()
        page = Page(
            id=uuid4(),
            tenant_id=tenant_id,
            slug=slug,
            title=title,
            blocks=list(blocks or []),
            is_published=is_published,
            seo_settings=dict(seo_settings or {}),
            meta_description=meta_description,
            theme_id=theme_id,
            created_at=now,
            updated_at=now,
            published_at=now if is_published else None,
        )
        self.pages[page.id] = page
        return page.copy()

    async def get_page(self, tenant_id: UUID, page_id: UUID) -> Page | None:
        page = self.pages.get(page_id)
        if page is None or page.tenant_id != tenant_id:
            return None
        return page.copy()

    async def list_pages(self, tenant_id: UUID) -> list[Page]:
        pages = [p.copy() for p in self.pages.values() if p.tenant_id == tenant_id]
        return sorted(pages, key=lambda p: p.created_at, reverse=True)

    async def delete_page(self, tenant_id: UUID, page_id: UUID) -> bool:
        page = self.pages.get(page_id)
        if page is None or page.tenant_id != tenant_id:
            return False
        del self.pages[page_id]
        self.versions.pop(page_id, None)
        return True

    async def get_published_page(self, tenant_id: UUID, slug: str) -> Page | None:
        for page in self.pages.values():
            if page.tenant_id == tenant_id and page.slug == slug and page.is_published:
                return page.copy()
        return None

    async def list_versions(self, tenant_id: UUID, page_id: UUID) -> list[PageVersion]:
        if await self.get_page(tenant_id, page_id) is None:
            return []
        return sorted(self.versions.get(page_id, []), key=lambda v: v.version_number)

    async def get_version(self, tenant_id: UUID, page_id: UUID, version_number: int) -> PageVersion | None:
        for version in await self.list_versions(tenant_id, page_id):
            if version.version_number == version_number:
                return version
        return None

    async def get_tenant_by_subdomain(self, subdomain: str) -> Tenant | None:
        for tenant in self.tenants.values():
            if tenant.subdomain == subdomain:
                return tenant
        return None

    # -- themes --

    async def list_themes(self, tenant_id: UUID) -> list[Theme]:
        themes = [t.copy() for t in self.themes.values() if t.tenant_id == tenant_id]
        return sorted(themes, key=lambda t: t.created_at, reverse=True)

    async def get_theme(self, tenant_id: UUID, theme_id: UUID) -> Theme | None:
        theme = self.themes.get(theme_id)
        if theme is None or theme.tenant_id != tenant_id:
            return None
        return theme.copy()

    async def get_active_theme(self, tenant_id: UUID) -> Theme | None:
        for theme in self.themes.values():
            if theme.tenant_id == tenant_id and theme.is_active:
                return theme.copy()
        return None

    async def delete_theme(self, tenant_id: UUID, theme_id: UUID) -> bool:
        if await self.get_theme(tenant_id, theme_id) is None:
            return False
        del self.themes[theme_id]
        return True

    # -- block types --

    async def list_block_types(self) -> list[BlockType]:
        return list(self.block_types)
