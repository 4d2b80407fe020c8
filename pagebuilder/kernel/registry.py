"""
Page Builder Kernel: Block Type Registry

load_registry() compiles every enabled block type once and freezes the
result. A registry is never mutated after construction; reloading builds a
new one and RegistryHolder swaps the reference in a single assignment, so a
render that already holds the old registry keeps a consistent view.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pagebuilder.kernel.errors import TemplateSyntaxError, UnknownBlockType
from pagebuilder.kernel.template import CompiledTemplate, compile_template
from pagebuilder.kernel.types import BlockType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledBlockType:
    """A block type paired with its compiled template."""

    block_type: BlockType
    template: CompiledTemplate

    @property
    def name(self) -> str:
        return self.block_type.name

    @property
    def category(self) -> str:
        return self.block_type.category

    def render(self, scope: Mapping[str, Any]) -> str:
        return self.template.render(scope)


class BlockTypeRegistry:
    """Read-only collection of compiled block types keyed by name."""

    def __init__(self, compiled: Mapping[str, CompiledBlockType], skipped: Iterable[str] = ()):
        self._types = MappingProxyType(dict(compiled))
        self._skipped = tuple(skipped)

    def get(self, name: str) -> CompiledBlockType | None:
        return self._types.get(name)

    def require(self, name: str) -> CompiledBlockType:
        compiled = self._types.get(name)
        if compiled is None:
            raise UnknownBlockType(name)
        return compiled

    @property
    def skipped(self) -> tuple[str, ...]:
        """Types dropped by a non-strict load because their template failed to compile."""
        return self._skipped

    def names(self) -> list[str]:
        return sorted(self._types)

    def block_types(self) -> list[BlockType]:
        """Enabled block types ordered by category, then name."""
        return [c.block_type for c in sorted(self._types.values(), key=lambda c: (c.category, c.name))]

    def by_category(self) -> dict[str, list[BlockType]]:
        """Group block types by category for the editor palette."""
        grouped: dict[str, list[BlockType]] = {}
        for block_type in self.block_types():
            grouped.setdefault(block_type.category, []).append(block_type)
        return grouped

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())


def load_registry(
    rows: Iterable[BlockType | Mapping[str, Any]],
    strict: bool = True,
) -> BlockTypeRegistry:
    """
    Build a registry from block type rows.

    Only enabled rows participate. Each template is compiled exactly once.

    Args:
        rows: BlockType objects or row mappings
        strict: If True, the first template error aborts the load. If False,
            the offending type is skipped and listed in registry.skipped.

    Returns:
        BlockTypeRegistry

    Raises:
        TemplateSyntaxError: In strict mode, naming the offending block type
    """
    compiled: dict[str, CompiledBlockType] = {}
    skipped: list[str] = []

    for row in rows:
        block_type = row if isinstance(row, BlockType) else BlockType.from_dict(row)
        if not block_type.enabled:
            continue
        try:
            template = compile_template(block_type.template, name=block_type.name)
        except TemplateSyntaxError as e:
            if strict:
                logger.error("Block registry load aborted: %s", e)
                raise
            logger.warning("Skipping block type %r: %s", block_type.name, e)
            skipped.append(block_type.name)
            continue
        compiled[block_type.name] = CompiledBlockType(block_type=block_type, template=template)

    logger.info("Loaded block registry with %d types (%d skipped)", len(compiled), len(skipped))
    return BlockTypeRegistry(compiled, skipped)


class RegistryHolder:
    """
    Process-wide pointer to the current registry.

    Readers call current() once per render and keep that instance for the
    whole page. Writers build a complete registry first, then swap.
    """

    def __init__(self, registry: BlockTypeRegistry | None = None):
        self._registry = registry if registry is not None else BlockTypeRegistry({})

    def current(self) -> BlockTypeRegistry:
        return self._registry

    def swap(self, registry: BlockTypeRegistry) -> BlockTypeRegistry:
        """Replace the current registry. Returns the previous one."""
        previous = self._registry
        self._registry = registry
        return previous

    def reload(self, rows: Iterable[BlockType | Mapping[str, Any]], strict: bool = True) -> BlockTypeRegistry:
        """
        Build a new registry from rows and swap it in.
        If the build fails, the current registry stays in place.
        """
        registry = load_registry(rows, strict=strict)
        self.swap(registry)
        return registry
