"""
Page Builder Kernel: Renderer

Pure function: (ordered block list, registry) → HTML string.
No IO. One bad block never aborts the page: unknown types and render
failures become HTML comments and rendering moves on to the next block.

There is no state shared between blocks, so rendering a list equals
concatenating the renders of its parts.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pagebuilder.kernel.errors import UnknownBlockType
from pagebuilder.kernel.registry import BlockTypeRegistry
from pagebuilder.kernel.sanitizer import escape_html, sanitize_config
from pagebuilder.kernel.types import BlockInstance, Page, Theme

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_page(
    blocks: Iterable[BlockInstance | Mapping[str, Any]] | Any,
    registry: BlockTypeRegistry,
    *,
    year: int | None = None,
) -> str:
    """
    Render an ordered block list to an HTML fragment.

    Args:
        blocks: BlockInstance objects or {"type", "config"} mappings, in page order
        registry: Registry to resolve block types against
        year: Override for the synthesized `year` field (defaults to the current year)

    Returns:
        Concatenated block HTML, including markers for skipped blocks
    """
    if not isinstance(blocks, (list, tuple)):
        return ""

    if year is None:
        year = datetime.now().year

    return "".join(render_block(block, registry, year=year) for block in blocks)


def render_block(
    block: BlockInstance | Mapping[str, Any] | Any,
    registry: BlockTypeRegistry,
    *,
    year: int | None = None,
) -> str:
    """
    Render a single block. Never raises: failures render as an HTML comment.
    """
    instance = _as_instance(block)
    try:
        compiled = registry.require(instance.type)
    except UnknownBlockType as e:
        logger.warning("%s", e)
        return f"<!-- Unknown block type: {_comment_text(instance.type)} -->"

    try:
        scope = build_scope(instance.config, year=year)
        return compiled.render(scope)
    except Exception:
        logger.exception("Error rendering block %s", instance.type)
        return f"<!-- Error rendering {_comment_text(instance.type)} block -->"


def build_scope(config: Any, *, year: int | None = None) -> dict[str, Any]:
    """
    The scope a block template executes against: the sanitized config plus
    `year` and `jsonConfig`. `jsonConfig` is the raw, unsanitized config for
    blocks that hand their data to client-side code. It parses back to the
    original config but carries no HTML-significant characters, so it is
    safe inside a quoted attribute or a <script type="application/json">.
    """
    sanitized = sanitize_config(config)
    scope: dict[str, Any] = dict(sanitized) if isinstance(sanitized, Mapping) else {}
    scope["year"] = year if year is not None else datetime.now().year
    scope["jsonConfig"] = json_for_html(config)
    return scope


def json_for_html(value: Any) -> str:
    """
    Serialize to JSON with < > & ' written as \\u escapes. These characters
    only ever occur inside JSON strings, so the result is still valid JSON
    for the same value.
    """
    return json.dumps(value, ensure_ascii=False, separators=(",", ":")).translate(_JSON_HTML_ESCAPES)


def render_document(
    page: Page,
    registry: BlockTypeRegistry,
    theme: Theme | None = None,
    *,
    year: int | None = None,
) -> str:
    """
    Render a complete HTML document for a storefront page: head with title,
    description and theme variables, body with the rendered blocks.
    """
    seo = page.seo_settings or {}
    title = escape_html(str(seo.get("title") or page.title))
    description = escape_html(str(seo.get("description") or page.meta_description or ""))

    parts: list[str] = []
    parts.append("<!DOCTYPE html>")
    parts.append('<html lang="en">')
    parts.append("<head>")
    parts.append('  <meta charset="utf-8">')
    parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1">')
    parts.append(f"  <title>{title}</title>")
    if description:
        parts.append(f'  <meta name="description" content="{description}">')
    parts.append(f'  <meta property="og:title" content="{title}">')
    parts.append('  <meta property="og:type" content="website">')

    if theme is not None:
        parts.append("  <style>")
        parts.append(render_theme_css(theme.settings))
        parts.append("  </style>")

    parts.append("</head>")
    parts.append("<body>")
    parts.append(render_page(page.blocks, registry, year=year))
    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts)


def render_theme_css(settings: Mapping[str, Any]) -> str:
    """
    Flatten theme settings into CSS custom properties.
    {"colors": {"primary": "#667eea"}} → --colors-primary: #667eea;
    """
    lines = [f"  --{name}: {value};" for name, value in _flatten_settings(settings)]
    return ":root {\n" + "\n".join(lines) + "\n}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_JSON_HTML_ESCAPES = {ord("<"): "\\u003c", ord(">"): "\\u003e", ord("&"): "\\u0026", ord("'"): "\\u0027"}

_CSS_UNSAFE = str.maketrans("", "", "<>{};\\\"'")


def _as_instance(block: Any) -> BlockInstance:
    if isinstance(block, BlockInstance):
        return block
    if isinstance(block, Mapping):
        return BlockInstance.from_dict(block)
    return BlockInstance(type="")


def _comment_text(text: str) -> str:
    """Make text safe inside <!-- -->."""
    return escape_html(text).replace("--", "-&#45;")


def _flatten_settings(settings: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    flat: list[tuple[str, str]] = []
    for key, value in settings.items():
        name = _kebab(f"{prefix}-{key}" if prefix else str(key))
        if isinstance(value, Mapping):
            flat.extend(_flatten_settings(value, name))
        elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
            flat.append((name, str(value).translate(_CSS_UNSAFE)))
    return flat


def _kebab(name: str) -> str:
    out: list[str] = []
    for ch in name:
        if ch.isupper():
            out.append("-" + ch.lower())
        elif ch.isalnum() or ch == "-":
            out.append(ch)
    return "".join(out)
