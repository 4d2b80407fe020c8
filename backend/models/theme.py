"""Theme models."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from backend.models.page import PageResponse
from pagebuilder.kernel.types import Theme


class CreateThemeRequest(BaseModel):
    """What the client sends to create a theme."""

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=100)
    settings: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = False


class UpdateThemeRequest(BaseModel):
    """What the client sends to update a theme. All fields optional."""

    model_config = {"extra": "forbid"}

    name: str | None = Field(default=None, min_length=1, max_length=100)
    settings: dict[str, Any] | None = None
    is_active: bool | None = None


class ThemeResponse(BaseModel):
    """What the API returns for a theme."""

    id: UUID
    name: str
    settings: dict[str, Any]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_theme(cls, theme: Theme) -> ThemeResponse:
        return cls(
            id=theme.id,
            name=theme.name,
            settings=theme.settings,
            is_active=theme.is_active,
            created_at=theme.created_at,
            updated_at=theme.updated_at,
        )


class SiteBootstrapResponse(BaseModel):
    """The default theme and the starter pages a bootstrap call created."""

    theme: ThemeResponse
    pages: list[PageResponse]
