"""Repository for block type rows. block_types is global: no tenant scoping."""

from __future__ import annotations

import asyncpg

from backend.db import system_conn
from pagebuilder.kernel.storage import BlockTypeSource
from pagebuilder.kernel.types import BlockType


def _row_to_block_type(row: asyncpg.Record) -> BlockType:
    """Convert a database row to a BlockType."""
    return BlockType(
        name=row["name"],
        category=row["category"],
        template=row["template"],
        default_config=row["default_config"] or {},
        schema=row["schema"] or {},
        enabled=row["is_enabled"],
        icon=row["icon"],
    )


class BlockTypeRepo(BlockTypeSource):
    """All block type database operations."""

    async def list_block_types(self) -> list[BlockType]:
        """All rows, enabled or not. The registry decides what participates."""
        async with system_conn() as conn:
            rows = await conn.fetch("SELECT * FROM block_types ORDER BY category, name")
            return [_row_to_block_type(row) for row in rows]
