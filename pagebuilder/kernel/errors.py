"""
Page Builder Kernel: Exceptions

Compile-time errors abort a registry load. Render-time errors are contained
per block by the renderer. Persistence errors always reach the caller.
"""

from __future__ import annotations

from uuid import UUID


class PageBuilderError(Exception):
    """Base class for all kernel errors."""
    pass


class TemplateSyntaxError(PageBuilderError):
    """Malformed directive in a block type template."""

    def __init__(self, message: str, block_type: str | None = None, lineno: int | None = None):
        self.message = message
        self.block_type = block_type
        self.lineno = lineno
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.block_type or "<template>"
        if self.lineno is not None:
            location = f"{location}:{self.lineno}"
        return f"{location}: {self.message}"

    def with_block_type(self, block_type: str) -> TemplateSyntaxError:
        """Copy of this error attributed to a block type."""
        return TemplateSyntaxError(self.message, block_type=block_type, lineno=self.lineno)


class UnknownBlockType(PageBuilderError):
    """A page references a type that is absent from or disabled in the registry."""

    def __init__(self, block_type: str):
        self.block_type = block_type
        super().__init__(f"Unknown block type: {block_type}")


class BlockRenderError(PageBuilderError):
    """A compiled template failed while executing against a scope."""

    def __init__(self, message: str, block_type: str | None = None):
        self.block_type = block_type
        super().__init__(message)


class VersionConflict(PageBuilderError):
    """Another writer already claimed this (page_id, version_number)."""

    def __init__(self, page_id: UUID, version_number: int):
        self.page_id = page_id
        self.version_number = version_number
        super().__init__(f"Version {version_number} of page {page_id} already exists")


class PersistenceError(PageBuilderError):
    """The data store failed. Never swallowed."""
    pass


class DuplicateSlug(PageBuilderError):
    """A page with this slug already exists for the tenant."""
    pass


class DuplicateThemeName(PageBuilderError):
    """A theme with this name already exists for the tenant."""
    pass
