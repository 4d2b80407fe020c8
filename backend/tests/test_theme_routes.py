"""Route tests for /api/themes."""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def create_theme(client, headers, name, **extra):
    res = await client.post("/api/themes", json={"name": name, **extra}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


class TestThemeCrud:
    async def test_unauthenticated(self, async_client):
        res = await async_client.get("/api/themes")
        assert res.status_code == 401

    async def test_create_and_get(self, async_client, auth_headers):
        created = await create_theme(async_client, auth_headers, "Dark", settings={"colors": {"primary": "#000"}})
        assert created["is_active"] is False
        assert created["settings"] == {"colors": {"primary": "#000"}}

        res = await async_client.get(f"/api/themes/{created['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["name"] == "Dark"

    async def test_duplicate_name(self, async_client, auth_headers):
        await create_theme(async_client, auth_headers, "Dark")
        res = await async_client.post("/api/themes", json={"name": "Dark"}, headers=auth_headers)
        assert res.status_code == 400
        assert res.json()["detail"] == "Theme name already exists."

    async def test_rename_to_taken_name(self, async_client, auth_headers):
        await create_theme(async_client, auth_headers, "Dark")
        light = await create_theme(async_client, auth_headers, "Light")
        res = await async_client.put(f"/api/themes/{light['id']}", json={"name": "Dark"}, headers=auth_headers)
        assert res.status_code == 400

    async def test_update_missing(self, async_client, auth_headers, memory_storage):
        await create_theme(async_client, auth_headers, "Dark", is_active=True)
        res = await async_client.put(f"/api/themes/{uuid4()}", json={"is_active": True}, headers=auth_headers)
        assert res.status_code == 404
        # the existing active theme was left alone
        assert [t.name for t in memory_storage.themes.values() if t.is_active] == ["Dark"]

    async def test_delete(self, async_client, auth_headers):
        created = await create_theme(async_client, auth_headers, "Dark")
        res = await async_client.delete(f"/api/themes/{created['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["message"] == "Theme deleted successfully."
        res = await async_client.get(f"/api/themes/{created['id']}", headers=auth_headers)
        assert res.status_code == 404

    async def test_list_scoped_to_tenant(self, async_client, auth_headers):
        from backend.auth import create_jwt

        await create_theme(async_client, auth_headers, "Dark")
        stranger = {"Authorization": f"Bearer {create_jwt(uuid4(), uuid4())}"}
        res = await async_client.get("/api/themes", headers=stranger)
        assert res.json() == []


class TestThemeActivation:
    async def test_activating_deactivates_others(self, async_client, auth_headers):
        dark = await create_theme(async_client, auth_headers, "Dark", is_active=True)
        light = await create_theme(async_client, auth_headers, "Light")

        res = await async_client.put(f"/api/themes/{light['id']}", json={"is_active": True}, headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["is_active"] is True

        res = await async_client.get("/api/themes", headers=auth_headers)
        active = {t["id"]: t["is_active"] for t in res.json()}
        assert active == {dark["id"]: False, light["id"]: True}

    async def test_create_active_deactivates_others(self, async_client, auth_headers):
        await create_theme(async_client, auth_headers, "Dark", is_active=True)
        await create_theme(async_client, auth_headers, "Light", is_active=True)

        res = await async_client.get("/api/themes", headers=auth_headers)
        assert [t["name"] for t in res.json() if t["is_active"]] == ["Light"]

    async def test_concurrent_activation_leaves_one_active(self, async_client, auth_headers):
        ids = [(await create_theme(async_client, auth_headers, f"T{i}"))["id"] for i in range(4)]

        results = await asyncio.gather(
            *(async_client.put(f"/api/themes/{i}", json={"is_active": True}, headers=auth_headers) for i in ids)
        )
        assert all(r.status_code == 200 for r in results)

        res = await async_client.get("/api/themes", headers=auth_headers)
        assert sum(t["is_active"] for t in res.json()) == 1
