"""Block registry service: the process-wide compiled block type registry."""

from __future__ import annotations

import asyncio
import logging

from backend.config import settings
from pagebuilder.kernel.registry import BlockTypeRegistry, RegistryHolder
from pagebuilder.kernel.storage import BlockTypeSource

logger = logging.getLogger(__name__)


class BlockRegistryService:
    """
    Owns the RegistryHolder every render reads from.

    Loaded once at startup and again whenever block type admin data
    changes. Renders in flight keep the registry they started with.
    """

    def __init__(self) -> None:
        self._holder = RegistryHolder()
        # Serializes reloads so the last rows read are the last swapped in.
        self._reload_lock = asyncio.Lock()

    def current(self) -> BlockTypeRegistry:
        return self._holder.current()

    def swap(self, registry: BlockTypeRegistry) -> BlockTypeRegistry:
        """Install a prebuilt registry. Returns the previous one."""
        return self._holder.swap(registry)

    async def reload(self, source: BlockTypeSource, strict: bool | None = None) -> BlockTypeRegistry:
        """
        Read block type rows and swap in a freshly compiled registry.

        Args:
            source: Where to read block type rows from
            strict: Override BLOCK_REGISTRY_STRICT for this load

        Returns:
            The new registry

        Raises:
            TemplateSyntaxError: In strict mode, if any enabled template is malformed.
                The current registry stays in place.
            PersistenceError: If the rows cannot be read
        """
        if strict is None:
            strict = settings.BLOCK_REGISTRY_STRICT
        async with self._reload_lock:
            rows = await source.list_block_types()
            registry = self._holder.reload(rows, strict=strict)
        if registry.skipped:
            logger.warning("Block registry reloaded without: %s", ", ".join(registry.skipped))
        return registry


# Singleton instance
block_registry = BlockRegistryService()
