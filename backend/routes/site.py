"""Tenant bootstrap: installs the starter theme and pages for a new storefront."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from backend.auth import get_current_editor
from backend.deps import get_page_storage, get_theme_service
from backend.models.editor import Editor
from backend.models.page import PageResponse
from backend.models.theme import SiteBootstrapResponse, ThemeResponse
from pagebuilder.kernel.defaults import create_default_site
from pagebuilder.kernel.storage import PageStorage
from pagebuilder.kernel.themes import ThemeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/site", tags=["site"])


@router.post("/bootstrap", status_code=200)
async def bootstrap_site(
    editor: Editor = Depends(get_current_editor),
    themes: ThemeService = Depends(get_theme_service),
    pages: PageStorage = Depends(get_page_storage),
) -> SiteBootstrapResponse:
    """
    Install the default theme and starter pages for the editor's tenant.

    Repeat calls keep what is already there and only fill in missing pages.
    """
    theme, created = await create_default_site(editor.tenant_id, themes, pages)
    logger.info("Site bootstrap for tenant %s by editor %s", editor.tenant_id, editor.id)
    return SiteBootstrapResponse(
        theme=ThemeResponse.from_theme(theme),
        pages=[PageResponse.from_page(p) for p in created],
    )
