"""
Page Builder Kernel: Version Store

Every page update first snapshots the block list it is about to replace.
Version numbers start at 1 and increase by one per update, per page, with
no gaps and no duplicates.

The snapshot and the page write happen in one storage transaction. Storage
rejects a duplicate (page_id, version_number); when two writers race for the
same number, the loser's transaction rolls back and the whole update is
retried with a freshly computed number.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from pagebuilder.kernel.errors import VersionConflict
from pagebuilder.kernel.storage import PageStorage, PageTransaction
from pagebuilder.kernel.types import Page, PageChanges, PageVersion

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class VersionStore:
    """Versioned page updates on top of a PageStorage."""

    def __init__(self, storage: PageStorage, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._storage = storage
        self.max_attempts = max_attempts

    async def snapshot_before_update(
        self,
        tx: PageTransaction,
        page_id: UUID,
        current_blocks: list[dict[str, Any]] | None,
        editor_id: UUID | None,
    ) -> PageVersion | None:
        """
        Record the pre-update block list as the page's next version.

        Args:
            tx: Open page transaction the update will also run in
            page_id: Page UUID
            current_blocks: Blocks currently stored, None if the page does not exist yet
            editor_id: Who is making the update

        Returns:
            The new PageVersion, or None when there is no existing page to snapshot

        Raises:
            VersionConflict: If another writer already took the computed number
        """
        if current_blocks is None:
            return None

        next_version = await tx.max_version_number(page_id) + 1
        return await tx.insert_version(
            PageVersion(
                page_id=page_id,
                version_number=next_version,
                blocks_snapshot=list(current_blocks),
                created_by=editor_id,
            )
        )

    async def update_page(
        self,
        tenant_id: UUID,
        page_id: UUID,
        changes: PageChanges,
        editor_id: UUID | None,
    ) -> Page | None:
        """
        Snapshot the current blocks, then apply changes, atomically.

        Returns:
            Updated Page, or None if the page does not exist (nothing is written)

        Raises:
            VersionConflict: If every attempt lost the race for a version number
            PersistenceError: If the store fails
        """
        conflict: VersionConflict | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                async with self._storage.transaction(tenant_id) as tx:
                    current = await tx.get_page(page_id)
                    if current is None:
                        return None
                    version = await self.snapshot_before_update(tx, page_id, current.blocks, editor_id)
                    updated = await tx.update_page(page_id, changes)
                if version is not None:
                    logger.info("Page %s saved as version %d", page_id, version.version_number)
                return updated
            except VersionConflict as e:
                conflict = e
                logger.warning(
                    "Version conflict on page %s (attempt %d/%d): %s",
                    page_id,
                    attempt,
                    self.max_attempts,
                    e,
                )

        assert conflict is not None
        raise conflict

    async def restore_version(
        self,
        tenant_id: UUID,
        page_id: UUID,
        version_number: int,
        editor_id: UUID | None,
    ) -> Page | None:
        """
        Put an old snapshot back as the page's blocks. This is an ordinary
        versioned update, so the blocks being replaced are kept as a new version.

        Returns:
            Updated Page, or None if the page or version does not exist
        """
        version = await self._storage.get_version(tenant_id, page_id, version_number)
        if version is None:
            return None
        return await self.update_page(
            tenant_id,
            page_id,
            PageChanges(blocks=list(version.blocks_snapshot)),
            editor_id,
        )

    async def list_versions(self, tenant_id: UUID, page_id: UUID) -> list[PageVersion]:
        return await self._storage.list_versions(tenant_id, page_id)

    async def get_version(self, tenant_id: UUID, page_id: UUID, version_number: int) -> PageVersion | None:
        return await self._storage.get_version(tenant_id, page_id, version_number)
