"""
Theme Activation Tests

At most one theme per tenant is active after any sequence of creates,
updates and activations, including concurrent ones.
"""

import asyncio
from uuid import uuid4

import pytest

from pagebuilder.kernel.errors import DuplicateThemeName
from pagebuilder.kernel.themes import ThemeService


async def active_names(storage, tenant_id):
    return sorted(t.name for t in await storage.list_themes(tenant_id) if t.is_active)


class TestThemeActivation:
    async def test_create_active_deactivates_others(self, storage, tenant_id):
        service = ThemeService(storage)
        await service.create_theme(tenant_id, "Light", is_active=True)
        await service.create_theme(tenant_id, "Dark", is_active=True)
        assert await active_names(storage, tenant_id) == ["Dark"]

    async def test_create_inactive_leaves_active_alone(self, storage, tenant_id):
        service = ThemeService(storage)
        await service.create_theme(tenant_id, "Light", is_active=True)
        await service.create_theme(tenant_id, "Draft")
        assert await active_names(storage, tenant_id) == ["Light"]

    async def test_activate_switches(self, storage, tenant_id):
        service = ThemeService(storage)
        await service.create_theme(tenant_id, "Light", is_active=True)
        dark = await service.create_theme(tenant_id, "Dark")

        activated = await service.activate_theme(tenant_id, dark.id)
        assert activated.is_active
        assert await active_names(storage, tenant_id) == ["Dark"]
        assert (await storage.get_active_theme(tenant_id)).id == dark.id

    async def test_deactivate_leaves_none_active(self, storage, tenant_id):
        service = ThemeService(storage)
        light = await service.create_theme(tenant_id, "Light", is_active=True)
        await service.update_theme(tenant_id, light.id, is_active=False)
        assert await active_names(storage, tenant_id) == []
        assert await storage.get_active_theme(tenant_id) is None

    async def test_update_settings_only(self, storage, tenant_id):
        service = ThemeService(storage)
        light = await service.create_theme(tenant_id, "Light", settings={"colors": {"primary": "#fff"}}, is_active=True)
        updated = await service.update_theme(tenant_id, light.id, settings={"colors": {"primary": "#000"}})
        assert updated.settings == {"colors": {"primary": "#000"}}
        assert updated.is_active
        assert updated.name == "Light"

    async def test_activate_missing_theme_changes_nothing(self, storage, tenant_id):
        service = ThemeService(storage)
        await service.create_theme(tenant_id, "Light", is_active=True)
        assert await service.activate_theme(tenant_id, uuid4()) is None
        assert await active_names(storage, tenant_id) == ["Light"]

    async def test_tenants_are_independent(self, storage):
        service = ThemeService(storage)
        t1, t2 = uuid4(), uuid4()
        await service.create_theme(t1, "Main", is_active=True)
        await service.create_theme(t2, "Main", is_active=True)
        assert await active_names(storage, t1) == ["Main"]
        assert await active_names(storage, t2) == ["Main"]

    async def test_other_tenant_cannot_activate(self, storage):
        service = ThemeService(storage)
        owner, intruder = uuid4(), uuid4()
        theme = await service.create_theme(owner, "Main")
        assert await service.activate_theme(intruder, theme.id) is None
        assert await active_names(storage, owner) == []

    async def test_duplicate_name_rejected_without_side_effects(self, storage, tenant_id):
        service = ThemeService(storage)
        await service.create_theme(tenant_id, "Light", is_active=True)
        with pytest.raises(DuplicateThemeName):
            await service.create_theme(tenant_id, "Light", is_active=True)
        assert await active_names(storage, tenant_id) == ["Light"]

    async def test_concurrent_activations_leave_one_active(self, storage, tenant_id):
        service = ThemeService(storage)
        themes = [await service.create_theme(tenant_id, f"Theme {i}") for i in range(6)]

        await asyncio.gather(*(service.activate_theme(tenant_id, t.id) for t in themes))

        active = [t for t in await storage.list_themes(tenant_id) if t.is_active]
        assert len(active) == 1

    async def test_concurrent_creates_leave_one_active(self, storage, tenant_id):
        service = ThemeService(storage)
        await asyncio.gather(*(service.create_theme(tenant_id, f"T{i}", is_active=True) for i in range(4)))
        assert len(await active_names(storage, tenant_id)) == 1
        assert len(await storage.list_themes(tenant_id)) == 4
