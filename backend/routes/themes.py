"""Theme CRUD routes. Activation keeps at most one active theme per tenant."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from backend.auth import get_current_editor
from backend.deps import get_theme_service, get_theme_storage
from backend.models.editor import Editor
from backend.models.page import MessageResponse
from backend.models.theme import CreateThemeRequest, ThemeResponse, UpdateThemeRequest
from pagebuilder.kernel.errors import DuplicateThemeName
from pagebuilder.kernel.storage import ThemeStorage
from pagebuilder.kernel.themes import ThemeService

router = APIRouter(prefix="/api/themes", tags=["themes"])

_DUPLICATE_NAME = "Theme name already exists."


@router.get("", status_code=200)
async def list_themes(
    editor: Editor = Depends(get_current_editor),
    storage: ThemeStorage = Depends(get_theme_storage),
) -> list[ThemeResponse]:
    """List the tenant's themes, newest first."""
    themes = await storage.list_themes(editor.tenant_id)
    return [ThemeResponse.from_theme(t) for t in themes]


@router.get("/{theme_id}", status_code=200)
async def get_theme(
    theme_id: UUID,
    editor: Editor = Depends(get_current_editor),
    storage: ThemeStorage = Depends(get_theme_storage),
) -> ThemeResponse:
    """Get a single theme by ID."""
    theme = await storage.get_theme(editor.tenant_id, theme_id)
    if not theme:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Theme not found.")
    return ThemeResponse.from_theme(theme)


@router.post("", status_code=201)
async def create_theme(
    req: CreateThemeRequest,
    editor: Editor = Depends(get_current_editor),
    themes: ThemeService = Depends(get_theme_service),
) -> ThemeResponse:
    """Create a theme. Creating it active deactivates the others."""
    try:
        theme = await themes.create_theme(editor.tenant_id, req.name, settings=req.settings, is_active=req.is_active)
    except DuplicateThemeName as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_NAME) from e
    return ThemeResponse.from_theme(theme)


@router.put("/{theme_id}", status_code=200)
async def update_theme(
    theme_id: UUID,
    req: UpdateThemeRequest,
    editor: Editor = Depends(get_current_editor),
    themes: ThemeService = Depends(get_theme_service),
) -> ThemeResponse:
    """Update a theme. is_active=true deactivates every other theme in the same transaction."""
    try:
        theme = await themes.update_theme(
            editor.tenant_id,
            theme_id,
            name=req.name,
            settings=req.settings,
            is_active=req.is_active,
        )
    except DuplicateThemeName as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_NAME) from e
    if not theme:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Theme not found.")
    return ThemeResponse.from_theme(theme)


@router.delete("/{theme_id}", status_code=200)
async def delete_theme(
    theme_id: UUID,
    editor: Editor = Depends(get_current_editor),
    storage: ThemeStorage = Depends(get_theme_storage),
) -> MessageResponse:
    """Delete a theme."""
    deleted = await storage.delete_theme(editor.tenant_id, theme_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Theme not found.")
    return MessageResponse(message="Theme deleted successfully.")
