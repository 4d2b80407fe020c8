"""Page routes: CRUD, versioned updates, version history, preview render."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from backend.auth import get_current_editor
from backend.deps import get_page_storage, get_registry, get_version_store
from backend.models.editor import Editor
from backend.models.page import (
    CreatePageRequest,
    MessageResponse,
    PageResponse,
    PageVersionResponse,
    RenderRequest,
    RenderResponse,
    UpdatePageRequest,
)
from pagebuilder.kernel.errors import DuplicateSlug, VersionConflict
from pagebuilder.kernel.registry import BlockTypeRegistry
from pagebuilder.kernel.renderer import render_page
from pagebuilder.kernel.storage import PageStorage
from pagebuilder.kernel.versioning import VersionStore

router = APIRouter(prefix="/api/pages", tags=["pages"])

_DUPLICATE_SLUG = "Page with this slug already exists."
_VERSION_CONFLICT = "The page was changed by someone else at the same time. Please retry."


@router.get("", status_code=200)
async def list_pages(
    editor: Editor = Depends(get_current_editor),
    storage: PageStorage = Depends(get_page_storage),
) -> list[PageResponse]:
    """List the tenant's pages, newest first."""
    pages = await storage.list_pages(editor.tenant_id)
    return [PageResponse.from_page(p) for p in pages]


@router.post("", status_code=201)
async def create_page(
    req: CreatePageRequest,
    editor: Editor = Depends(get_current_editor),
    storage: PageStorage = Depends(get_page_storage),
) -> PageResponse:
    """Create a page. Slugs are unique per tenant."""
    try:
        page = await storage.create_page(
            editor.tenant_id,
            slug=req.slug,
            title=req.title,
            blocks=[b.model_dump() for b in req.blocks],
            meta_description=req.meta_description,
            theme_id=req.theme_id,
            seo_settings=req.seo_settings,
            is_published=req.is_published,
        )
    except DuplicateSlug as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_SLUG) from e
    return PageResponse.from_page(page)


@router.post("/render", status_code=200)
async def render_preview(
    req: RenderRequest,
    editor: Editor = Depends(get_current_editor),
    registry: BlockTypeRegistry = Depends(get_registry),
) -> RenderResponse:
    """
    Render an unsaved block list for the editor preview.

    Unknown or failing blocks come back as HTML comments in place; the rest
    of the list still renders.
    """
    if not isinstance(req.blocks, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Blocks must be an array.")
    return RenderResponse(html=render_page(req.blocks, registry))


@router.get("/{page_id}", status_code=200)
async def get_page(
    page_id: UUID,
    editor: Editor = Depends(get_current_editor),
    storage: PageStorage = Depends(get_page_storage),
) -> PageResponse:
    """Get a single page by ID."""
    page = await storage.get_page(editor.tenant_id, page_id)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return PageResponse.from_page(page)


@router.put("/{page_id}", status_code=200)
async def update_page(
    page_id: UUID,
    req: UpdatePageRequest,
    editor: Editor = Depends(get_current_editor),
    versions: VersionStore = Depends(get_version_store),
) -> PageResponse:
    """
    Update a page. The block list being replaced is kept as the page's
    next version in the same transaction.
    """
    try:
        page = await versions.update_page(editor.tenant_id, page_id, req.to_changes(), editor.id)
    except DuplicateSlug as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_SLUG) from e
    except VersionConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_VERSION_CONFLICT) from e
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return PageResponse.from_page(page)


@router.delete("/{page_id}", status_code=200)
async def delete_page(
    page_id: UUID,
    editor: Editor = Depends(get_current_editor),
    storage: PageStorage = Depends(get_page_storage),
) -> MessageResponse:
    """Delete a page and its version history."""
    deleted = await storage.delete_page(editor.tenant_id, page_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    return MessageResponse(message="Page deleted successfully.")


@router.get("/{page_id}/versions", status_code=200)
async def list_versions(
    page_id: UUID,
    editor: Editor = Depends(get_current_editor),
    versions: VersionStore = Depends(get_version_store),
    storage: PageStorage = Depends(get_page_storage),
) -> list[PageVersionResponse]:
    """Version history of a page, oldest first."""
    if not await storage.get_page(editor.tenant_id, page_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")
    history = await versions.list_versions(editor.tenant_id, page_id)
    return [PageVersionResponse.from_version(v) for v in history]


@router.post("/{page_id}/versions/{version_number}/restore", status_code=200)
async def restore_version(
    page_id: UUID,
    version_number: int,
    editor: Editor = Depends(get_current_editor),
    versions: VersionStore = Depends(get_version_store),
) -> PageResponse:
    """Put an old version's blocks back. The blocks being replaced become a new version."""
    try:
        page = await versions.restore_version(editor.tenant_id, page_id, version_number, editor.id)
    except VersionConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_VERSION_CONFLICT) from e
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Version not found.")
    return PageResponse.from_page(page)
