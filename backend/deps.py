"""
FastAPI dependency providers.

Routes never construct storage themselves. Production wiring uses the
Postgres repos; tests override these providers with MemoryStorage.
"""

from __future__ import annotations

from fastapi import Depends

from backend.config import settings
from backend.repos.block_type_repo import BlockTypeRepo
from backend.repos.page_repo import PageRepo
from backend.repos.theme_repo import ThemeRepo
from backend.services.block_registry import block_registry
from pagebuilder.kernel.registry import BlockTypeRegistry
from pagebuilder.kernel.storage import BlockTypeSource, PageStorage, ThemeStorage
from pagebuilder.kernel.themes import ThemeService
from pagebuilder.kernel.versioning import VersionStore

page_repo = PageRepo()
theme_repo = ThemeRepo()
block_type_repo = BlockTypeRepo()


def get_page_storage() -> PageStorage:
    return page_repo


def get_theme_storage() -> ThemeStorage:
    return theme_repo


def get_block_type_source() -> BlockTypeSource:
    return block_type_repo


def get_registry() -> BlockTypeRegistry:
    """The registry at request start. A reload mid-request does not affect this render."""
    return block_registry.current()


def get_version_store(storage: PageStorage = Depends(get_page_storage)) -> VersionStore:
    return VersionStore(storage, max_attempts=settings.VERSION_RETRY_ATTEMPTS)


def get_theme_service(storage: ThemeStorage = Depends(get_theme_storage)) -> ThemeService:
    return ThemeService(storage)
