"""
Page Builder Kernel: the pure engine.

Components:
  template    : block template source → compiled node tree
  sanitizer   : escape block configs before they reach a template
  registry    : immutable name → compiled block type map, swapped atomically
  renderer    : (blocks, registry) → HTML, one bad block never aborts a page
  versioning  : snapshot-before-update with gap-free version numbers
  themes      : at most one active theme per tenant
"""

from pagebuilder.kernel.registry import BlockTypeRegistry, RegistryHolder, load_registry
from pagebuilder.kernel.renderer import render_block, render_document, render_page
from pagebuilder.kernel.sanitizer import escape_html, sanitize_config
from pagebuilder.kernel.storage import MemoryStorage
from pagebuilder.kernel.template import CompiledTemplate, compile_template
from pagebuilder.kernel.themes import ThemeService
from pagebuilder.kernel.versioning import VersionStore

__all__ = [
    "compile_template",
    "CompiledTemplate",
    "escape_html",
    "sanitize_config",
    "BlockTypeRegistry",
    "RegistryHolder",
    "load_registry",
    "render_page",
    "render_block",
    "render_document",
    "VersionStore",
    "ThemeService",
    "MemoryStorage",
]
