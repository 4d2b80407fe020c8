"""Block type models for the editor palette."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from pagebuilder.kernel.types import BlockType


class BlockTypeResponse(BaseModel):
    """A block type as the editor sees it. The template itself is not exposed."""

    name: str
    category: str
    icon: str | None
    default_config: dict[str, Any]
    # Advisory only: editors use it to build forms, nothing validates against it.
    config_schema: dict[str, Any] = Field(serialization_alias="schema")

    @classmethod
    def from_block_type(cls, block_type: BlockType) -> BlockTypeResponse:
        return cls(
            name=block_type.name,
            category=block_type.category,
            icon=block_type.icon,
            default_config=block_type.default_config,
            config_schema=block_type.schema,
        )


class BlockTypeListResponse(BaseModel):
    """Enabled block types, flat and grouped by category."""

    block_types: list[BlockTypeResponse]
    by_category: dict[str, list[BlockTypeResponse]]


class ReloadResponse(BaseModel):
    """Result of rebuilding the block registry."""

    loaded: list[str]
    skipped: list[str]
