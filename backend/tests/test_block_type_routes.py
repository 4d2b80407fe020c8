"""Route tests for /api/block-types: palette listing and registry reloads."""

from __future__ import annotations

import pytest

from backend.services.block_registry import block_registry
from pagebuilder.kernel.types import BlockType

pytestmark = pytest.mark.asyncio(loop_scope="session")


class TestListBlockTypes:
    async def test_unauthenticated(self, async_client):
        res = await async_client.get("/api/block-types")
        assert res.status_code == 401

    async def test_grouped_by_category(self, async_client, auth_headers):
        res = await async_client.get("/api/block-types", headers=auth_headers)
        assert res.status_code == 200
        data = res.json()

        assert set(data["by_category"]) == {"layout", "content", "media", "ecommerce"}
        assert [b["name"] for b in data["by_category"]["content"]] == ["call-to-action", "text"]
        assert len(data["block_types"]) == 11

    async def test_schema_exposed_template_hidden(self, async_client, auth_headers):
        res = await async_client.get("/api/block-types", headers=auth_headers)
        hero = next(b for b in res.json()["block_types"] if b["name"] == "hero")

        assert "schema" in hero
        assert "template" not in hero
        assert hero["default_config"]["title"]


class TestReload:
    async def test_reload_picks_up_new_rows(self, async_client, auth_headers, memory_storage):
        memory_storage.block_types.append(BlockType(name="banner", category="layout", template="<b>{{text}}</b>"))

        res = await async_client.post("/api/block-types/reload", headers=auth_headers)
        assert res.status_code == 200
        assert "banner" in res.json()["loaded"]
        assert res.json()["skipped"] == []

        res = await async_client.post(
            "/api/pages/render",
            json={"blocks": [{"type": "banner", "config": {"text": "Sale"}}]},
            headers=auth_headers,
        )
        assert res.json()["html"] == "<b>Sale</b>"

    async def test_disabled_rows_not_loaded(self, async_client, auth_headers, memory_storage):
        memory_storage.block_types.append(
            BlockType(name="banner", category="layout", template="<b>{{text}}</b>", enabled=False)
        )
        res = await async_client.post("/api/block-types/reload", headers=auth_headers)
        assert "banner" not in res.json()["loaded"]

    async def test_bad_template_keeps_current_registry(self, async_client, auth_headers, memory_storage, monkeypatch):
        monkeypatch.setattr("backend.config.settings.BLOCK_REGISTRY_STRICT", True)
        before = block_registry.current()
        memory_storage.block_types.append(BlockType(name="broken", category="layout", template="{{#if x}}open"))

        res = await async_client.post("/api/block-types/reload", headers=auth_headers)
        assert res.status_code == 400
        assert "broken" in res.json()["detail"]
        assert block_registry.current() is before

    async def test_bad_template_skipped_when_not_strict(
        self, async_client, auth_headers, memory_storage, monkeypatch
    ):
        monkeypatch.setattr("backend.config.settings.BLOCK_REGISTRY_STRICT", False)
        memory_storage.block_types.append(BlockType(name="broken", category="layout", template="{{#if x}}open"))

        res = await async_client.post("/api/block-types/reload", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["skipped"] == ["broken"]
        assert "hero" in res.json()["loaded"]
