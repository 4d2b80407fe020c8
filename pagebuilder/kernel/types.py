"""
Page Builder Kernel: Shared Types

Data classes used across the template compiler, registry, renderer,
version store, and storage adapters. Rows coming out of storage are
converted into these; the kernel never sees driver records.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Union
from uuid import UUID

# ---------------------------------------------------------------------------
# JSON values
# ---------------------------------------------------------------------------

# Block configs are arbitrary JSON: String | Number | Bool | Null | Array | Object.
JsonValue = Union[str, int, float, bool, None, list["JsonValue"], dict[str, "JsonValue"]]
JsonObject = dict[str, JsonValue]

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

# Config key whose string value is trusted author HTML and is never escaped.
RICH_TEXT_FIELD = "content"

BLOCK_CATEGORIES: set[str] = {"layout", "content", "media", "ecommerce"}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlockType:
    """
    An admin-defined block: template text plus default config and an
    advisory schema. Immutable once loaded into a registry.
    """

    name: str
    category: str
    template: str
    default_config: JsonObject = field(default_factory=dict)
    schema: JsonObject = field(default_factory=dict)
    enabled: bool = True
    icon: str | None = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> BlockType:
        return cls(
            name=d["name"],
            category=d.get("category", "content"),
            template=d.get("template", ""),
            default_config=d.get("default_config") or {},
            schema=d.get("schema") or {},
            enabled=d.get("enabled", d.get("is_enabled", True)),
            icon=d.get("icon"),
        )


@dataclass(frozen=True)
class BlockInstance:
    """One entry in a page's ordered block list."""

    type: str
    config: JsonObject = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "config": self.config}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> BlockInstance:
        config = d.get("config")
        return cls(type=str(d.get("type", "")), config=config if config is not None else {})


@dataclass
class Page:
    """A tenant's addressable document. `blocks` order is rendering order."""

    id: UUID
    tenant_id: UUID
    slug: str
    title: str
    blocks: list[dict[str, Any]] = field(default_factory=list)
    is_published: bool = False
    seo_settings: dict[str, Any] = field(default_factory=dict)
    meta_description: str = ""
    theme_id: UUID | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    published_at: datetime | None = None

    def block_instances(self) -> list[BlockInstance]:
        return [BlockInstance.from_dict(b) for b in self.blocks]

    def copy(self) -> Page:
        return replace(self, blocks=list(self.blocks), seo_settings=dict(self.seo_settings))


@dataclass(frozen=True)
class PageVersion:
    """Immutable snapshot of a page's block list taken before an update."""

    page_id: UUID
    version_number: int
    blocks_snapshot: list[dict[str, Any]]
    created_by: UUID | None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class Theme:
    """Global look-and-feel settings. At most one active per tenant."""

    id: UUID
    tenant_id: UUID
    name: str
    settings: dict[str, Any] = field(default_factory=dict)
    is_active: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def copy(self) -> Theme:
        return replace(self, settings=dict(self.settings))


@dataclass(frozen=True)
class Tenant:
    """Storefront owner, resolved from the request subdomain."""

    id: UUID
    subdomain: str
    store_name: str = ""


@dataclass(frozen=True)
class PageChanges:
    """
    Fields of a page update. None means "leave unchanged", matching the
    COALESCE semantics of the persisted update.
    """

    slug: str | None = None
    title: str | None = None
    meta_description: str | None = None
    theme_id: UUID | None = None
    blocks: list[dict[str, Any]] | None = None
    is_published: bool | None = None
    seo_settings: dict[str, Any] | None = None

    def as_updates(self) -> dict[str, Any]:
        """Only the fields that were provided."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_valid_slug(value: str) -> bool:
    """Lowercase letters, digits and hyphens only."""
    return bool(SLUG_PATTERN.match(value))


def now_utc() -> datetime:
    return datetime.now(UTC)
