"""
Page Builder Kernel: Theme Activation

At most one theme per tenant is active. Every write that can set
is_active runs inside the tenant's theme transaction, which storage
serializes per tenant, and clears the active flag on all siblings first.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from pagebuilder.kernel.storage import ThemeStorage
from pagebuilder.kernel.types import Theme

logger = logging.getLogger(__name__)


class ThemeService:
    """Theme writes that preserve the single-active-theme invariant."""

    def __init__(self, storage: ThemeStorage):
        self._storage = storage

    async def create_theme(
        self,
        tenant_id: UUID,
        name: str,
        settings: dict[str, Any] | None = None,
        is_active: bool = False,
    ) -> Theme:
        """
        Create a theme. Raises DuplicateThemeName if the tenant already has the name.
        """
        async with self._storage.theme_transaction(tenant_id) as tx:
            if is_active:
                await tx.deactivate_all()
            return await tx.insert_theme(name, settings or {}, is_active)

    async def update_theme(
        self,
        tenant_id: UUID,
        theme_id: UUID,
        name: str | None = None,
        settings: dict[str, Any] | None = None,
        is_active: bool | None = None,
    ) -> Theme | None:
        """
        Partial update. Setting is_active=True deactivates every other theme
        of the tenant in the same transaction.

        Returns:
            Updated Theme, or None if the theme does not exist (nothing is written)
        """
        async with self._storage.theme_transaction(tenant_id) as tx:
            if await tx.get_theme(theme_id) is None:
                return None
            if is_active:
                await tx.deactivate_all()
            theme = await tx.update_theme(theme_id, name=name, settings=settings, is_active=is_active)
        if is_active:
            logger.info("Activated theme %s for tenant %s", theme_id, tenant_id)
        return theme

    async def activate_theme(self, tenant_id: UUID, theme_id: UUID) -> Theme | None:
        return await self.update_theme(tenant_id, theme_id, is_active=True)

    async def get_theme_by_name(self, tenant_id: UUID, name: str) -> Theme | None:
        for theme in await self._storage.list_themes(tenant_id):
            if theme.name == name:
                return theme
        return None
