"""Page models: CRUD requests, versions, preview and storefront rendering."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from pagebuilder.kernel.types import Page, PageChanges, PageVersion

SLUG_REGEX = r"^[a-z0-9-]+$"


class BlockInstanceModel(BaseModel):
    """One entry of a page's block list as sent by the editor."""

    model_config = {"extra": "forbid"}

    type: str = Field(min_length=1, max_length=100)
    config: dict[str, Any] = Field(default_factory=dict)


class CreatePageRequest(BaseModel):
    """What the client sends to create a page."""

    model_config = {"extra": "forbid"}

    slug: str = Field(min_length=1, max_length=100, pattern=SLUG_REGEX)
    title: str = Field(min_length=1, max_length=200)
    blocks: list[BlockInstanceModel] = Field(default_factory=list)
    meta_description: str = Field(default="", max_length=500)
    theme_id: UUID | None = None
    seo_settings: dict[str, Any] = Field(default_factory=dict)
    is_published: bool = False


class UpdatePageRequest(BaseModel):
    """What the client sends to update a page. Omitted fields stay unchanged."""

    model_config = {"extra": "forbid"}

    slug: str | None = Field(default=None, min_length=1, max_length=100, pattern=SLUG_REGEX)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    blocks: list[BlockInstanceModel] | None = None
    meta_description: str | None = Field(default=None, max_length=500)
    theme_id: UUID | None = None
    seo_settings: dict[str, Any] | None = None
    is_published: bool | None = None

    def to_changes(self) -> PageChanges:
        return PageChanges(
            slug=self.slug,
            title=self.title,
            meta_description=self.meta_description,
            theme_id=self.theme_id,
            blocks=[b.model_dump() for b in self.blocks] if self.blocks is not None else None,
            is_published=self.is_published,
            seo_settings=self.seo_settings,
        )


class PageResponse(BaseModel):
    """What the API returns for a page."""

    id: UUID
    slug: str
    title: str
    blocks: list[dict[str, Any]]
    meta_description: str
    theme_id: UUID | None
    seo_settings: dict[str, Any]
    is_published: bool
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None

    @classmethod
    def from_page(cls, page: Page) -> PageResponse:
        return cls(
            id=page.id,
            slug=page.slug,
            title=page.title,
            blocks=page.blocks,
            meta_description=page.meta_description,
            theme_id=page.theme_id,
            seo_settings=page.seo_settings,
            is_published=page.is_published,
            created_at=page.created_at,
            updated_at=page.updated_at,
            published_at=page.published_at,
        )


class PageVersionResponse(BaseModel):
    """One entry of a page's version history."""

    page_id: UUID
    version_number: int
    blocks_snapshot: list[dict[str, Any]]
    created_by: UUID | None
    created_at: datetime

    @classmethod
    def from_version(cls, version: PageVersion) -> PageVersionResponse:
        return cls(
            page_id=version.page_id,
            version_number=version.version_number,
            blocks_snapshot=version.blocks_snapshot,
            created_by=version.created_by,
            created_at=version.created_at,
        )


class RenderRequest(BaseModel):
    """Preview request: an unsaved block list."""

    model_config = {"extra": "forbid"}

    # Validated in the route so malformed entries degrade per block.
    blocks: Any = None


class RenderResponse(BaseModel):
    html: str


class StorefrontPage(BaseModel):
    """Public subset of a page."""

    title: str
    slug: str
    meta_description: str
    seo_settings: dict[str, Any]


class StorefrontPageResponse(BaseModel):
    """What the storefront JSON endpoint returns."""

    page: StorefrontPage
    html: str
    store_name: str


class MessageResponse(BaseModel):
    message: str
