"""
Tests for PageRepo, ThemeRepo and BlockTypeRepo against Postgres.

NOTE: These tests require a running PostgreSQL database with the DATABASE_URL environment variable set.
Run `alembic upgrade head` before running these tests.
"""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from backend.repos.block_type_repo import BlockTypeRepo
from backend.repos.page_repo import PageRepo
from backend.repos.theme_repo import ThemeRepo
from pagebuilder.kernel.errors import DuplicateSlug, DuplicateThemeName
from pagebuilder.kernel.themes import ThemeService
from pagebuilder.kernel.types import PageChanges
from pagebuilder.kernel.versioning import VersionStore

pytestmark = pytest.mark.asyncio(loop_scope="session")

page_repo = PageRepo()
theme_repo = ThemeRepo()
block_type_repo = BlockTypeRepo()

HERO = {"type": "hero", "config": {"title": "Hi"}}


# ── pages ───────────────────────────────────────────────────────────────────


class TestPageRepo:
    async def test_create_and_get(self, test_tenant_id):
        page = await page_repo.create_page(test_tenant_id, slug="home", title="Home", blocks=[HERO])

        fetched = await page_repo.get_page(test_tenant_id, page.id)
        assert fetched is not None
        assert fetched.blocks == [HERO]
        assert fetched.published_at is None

    async def test_duplicate_slug(self, test_tenant_id):
        await page_repo.create_page(test_tenant_id, slug="home", title="Home")
        with pytest.raises(DuplicateSlug):
            await page_repo.create_page(test_tenant_id, slug="home", title="Again")

    async def test_same_slug_in_two_tenants(self, test_tenant_id, second_tenant_id):
        await page_repo.create_page(test_tenant_id, slug="home", title="Mine")
        other = await page_repo.create_page(second_tenant_id, slug="home", title="Theirs")
        assert other.tenant_id == second_tenant_id

    async def test_cross_tenant_get(self, test_tenant_id, second_tenant_id):
        page = await page_repo.create_page(second_tenant_id, slug="secret", title="Secret")
        assert await page_repo.get_page(test_tenant_id, page.id) is None
        assert await page_repo.delete_page(test_tenant_id, page.id) is False

    async def test_published_lookup(self, test_tenant_id):
        await page_repo.create_page(test_tenant_id, slug="draft", title="Draft")
        live = await page_repo.create_page(test_tenant_id, slug="live", title="Live", is_published=True)

        assert live.published_at is not None
        assert await page_repo.get_published_page(test_tenant_id, "draft") is None
        assert (await page_repo.get_published_page(test_tenant_id, "live")).id == live.id

    async def test_tenant_by_subdomain(self, test_tenant_id):
        page = await page_repo.create_page(test_tenant_id, slug="x", title="X")
        assert page.tenant_id == test_tenant_id
        assert await page_repo.get_tenant_by_subdomain(f"missing-{uuid4().hex}") is None


class TestVersioning:
    async def test_sequential_updates(self, test_tenant_id):
        store = VersionStore(page_repo)
        page = await page_repo.create_page(test_tenant_id, slug="v", title="V", blocks=[HERO])

        for i in range(3):
            await store.update_page(test_tenant_id, page.id, PageChanges(title=f"t{i}"), None)

        versions = await store.list_versions(test_tenant_id, page.id)
        assert [v.version_number for v in versions] == [1, 2, 3]
        assert versions[0].blocks_snapshot == [HERO]

    async def test_concurrent_updates_gap_free(self, test_tenant_id):
        store = VersionStore(page_repo)
        page = await page_repo.create_page(test_tenant_id, slug="race", title="Race")

        await asyncio.gather(
            *(
                store.update_page(test_tenant_id, page.id, PageChanges(blocks=[{"type": "text", "config": {"n": i}}]), None)
                for i in range(5)
            )
        )

        versions = await store.list_versions(test_tenant_id, page.id)
        assert [v.version_number for v in versions] == [1, 2, 3, 4, 5]

    async def test_failed_update_writes_no_version(self, test_tenant_id):
        store = VersionStore(page_repo)
        await page_repo.create_page(test_tenant_id, slug="taken", title="Taken")
        page = await page_repo.create_page(test_tenant_id, slug="mine", title="Mine")

        with pytest.raises(DuplicateSlug):
            await store.update_page(test_tenant_id, page.id, PageChanges(slug="taken"), None)

        assert await store.list_versions(test_tenant_id, page.id) == []

    async def test_first_publish_sets_published_at_once(self, test_tenant_id):
        store = VersionStore(page_repo)
        page = await page_repo.create_page(test_tenant_id, slug="pub", title="Pub")

        first = await store.update_page(test_tenant_id, page.id, PageChanges(is_published=True), None)
        again = await store.update_page(test_tenant_id, page.id, PageChanges(title="Pub 2"), None)
        assert first.published_at is not None
        assert again.published_at == first.published_at

    async def test_versions_hidden_across_tenants(self, test_tenant_id, second_tenant_id):
        store = VersionStore(page_repo)
        page = await page_repo.create_page(test_tenant_id, slug="h", title="H")
        await store.update_page(test_tenant_id, page.id, PageChanges(title="H2"), None)

        assert await store.list_versions(second_tenant_id, page.id) == []
        assert await store.get_version(second_tenant_id, page.id, 1) is None


# ── themes ──────────────────────────────────────────────────────────────────


class TestThemeRepo:
    async def test_duplicate_name(self, test_tenant_id):
        themes = ThemeService(theme_repo)
        await themes.create_theme(test_tenant_id, "Dark")
        with pytest.raises(DuplicateThemeName):
            await themes.create_theme(test_tenant_id, "Dark")

    async def test_concurrent_activation(self, test_tenant_id):
        themes = ThemeService(theme_repo)
        created = [await themes.create_theme(test_tenant_id, f"T{i}") for i in range(4)]

        await asyncio.gather(*(themes.activate_theme(test_tenant_id, t.id) for t in created))

        active = [t for t in await theme_repo.list_themes(test_tenant_id) if t.is_active]
        assert len(active) == 1
        assert (await theme_repo.get_active_theme(test_tenant_id)).id == active[0].id

    async def test_delete_theme_detaches_pages(self, test_tenant_id):
        themes = ThemeService(theme_repo)
        theme = await themes.create_theme(test_tenant_id, "Gone")
        page = await page_repo.create_page(test_tenant_id, slug="themed", title="T", theme_id=theme.id)

        assert await theme_repo.delete_theme(test_tenant_id, theme.id) is True
        assert (await page_repo.get_page(test_tenant_id, page.id)).theme_id is None


# ── block types ─────────────────────────────────────────────────────────────


class TestBlockTypeRepo:
    async def test_rows_load_into_registry(self, db_pool):
        from pagebuilder.kernel.registry import load_registry

        rows = await block_type_repo.list_block_types()
        registry = load_registry(rows)
        assert "hero" in registry
        assert registry.skipped == ()
