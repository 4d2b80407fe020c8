"""
Page Builder Kernel: Config Sanitizer

Pure function: block config → escaped copy of the config.

Every string reachable from the config is HTML-escaped, except a string
stored directly under the key `content`, which holds trusted rich text
written by the page author. The exemption is per key: a `content` key inside
a list element's mapping is exempt, a list stored under `content` is not.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pagebuilder.kernel.template import to_display_string
from pagebuilder.kernel.types import RICH_TEXT_FIELD, JsonValue

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}
_ESCAPE_TABLE = str.maketrans(_HTML_ESCAPES)


def escape_html(text: str) -> str:
    """Escape &, <, >, " and ' as HTML entities."""
    return text.translate(_ESCAPE_TABLE)


def sanitize_config(config: Any) -> Any:
    """
    Recursively escape a block config.

    Non-mapping input (already-scalar config, None) is returned unchanged.
    The input is never mutated.
    """
    if not isinstance(config, Mapping):
        return config
    return {key: _sanitize_field(key, value) for key, value in config.items()}


def _sanitize_field(key: str, value: JsonValue) -> JsonValue:
    if isinstance(value, str):
        return value if key == RICH_TEXT_FIELD else escape_html(value)
    if isinstance(value, (list, tuple)):
        return _sanitize_list(value)
    if isinstance(value, Mapping):
        return sanitize_config(value)
    # int, float, bool, None
    return value


def _sanitize_list(items: list[JsonValue] | tuple[JsonValue, ...]) -> list[JsonValue]:
    sanitized: list[JsonValue] = []
    for item in items:
        if item is None:
            sanitized.append(None)
        elif isinstance(item, Mapping):
            sanitized.append(sanitize_config(item))
        elif isinstance(item, (list, tuple)):
            sanitized.append(_sanitize_list(item))
        else:
            # Scalars inside lists are always treated as text.
            sanitized.append(escape_html(to_display_string(item)))
    return sanitized
