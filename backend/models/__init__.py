"""
Pydantic models for the page builder API.

All request/response shapes defined here. No imports from db, repos, or routes.
"""

from backend.models.block_type import BlockTypeListResponse, BlockTypeResponse, ReloadResponse
from backend.models.editor import Editor
from backend.models.page import (
    BlockInstanceModel,
    CreatePageRequest,
    MessageResponse,
    PageResponse,
    PageVersionResponse,
    RenderRequest,
    RenderResponse,
    StorefrontPage,
    StorefrontPageResponse,
    UpdatePageRequest,
)
from backend.models.theme import CreateThemeRequest, ThemeResponse, UpdateThemeRequest

__all__ = [
    # Identity
    "Editor",
    # Page models
    "BlockInstanceModel",
    "CreatePageRequest",
    "UpdatePageRequest",
    "PageResponse",
    "PageVersionResponse",
    "RenderRequest",
    "RenderResponse",
    "StorefrontPage",
    "StorefrontPageResponse",
    "MessageResponse",
    # Theme models
    "CreateThemeRequest",
    "UpdateThemeRequest",
    "ThemeResponse",
    # Block type models
    "BlockTypeResponse",
    "BlockTypeListResponse",
    "ReloadResponse",
]
