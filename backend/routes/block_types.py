"""Block type routes: the editor palette and registry reloads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.auth import get_current_editor
from backend.deps import get_block_type_source, get_registry
from backend.models.block_type import BlockTypeListResponse, BlockTypeResponse, ReloadResponse
from backend.models.editor import Editor
from backend.services.block_registry import block_registry
from pagebuilder.kernel.errors import TemplateSyntaxError
from pagebuilder.kernel.registry import BlockTypeRegistry
from pagebuilder.kernel.storage import BlockTypeSource

router = APIRouter(prefix="/api/block-types", tags=["block-types"])


@router.get("", status_code=200)
async def list_block_types(
    editor: Editor = Depends(get_current_editor),
    registry: BlockTypeRegistry = Depends(get_registry),
) -> BlockTypeListResponse:
    """Enabled block types, flat and grouped by category."""
    return BlockTypeListResponse(
        block_types=[BlockTypeResponse.from_block_type(b) for b in registry.block_types()],
        by_category={
            category: [BlockTypeResponse.from_block_type(b) for b in types]
            for category, types in registry.by_category().items()
        },
    )


@router.post("/reload", status_code=200)
async def reload_block_types(
    editor: Editor = Depends(get_current_editor),
    source: BlockTypeSource = Depends(get_block_type_source),
) -> ReloadResponse:
    """
    Rebuild the registry from the block_types table and swap it in.
    A malformed template in strict mode leaves the current registry in place.
    """
    try:
        registry = await block_registry.reload(source)
    except TemplateSyntaxError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ReloadResponse(loaded=registry.names(), skipped=list(registry.skipped))
