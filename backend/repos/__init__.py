"""
Repository layer for the page builder.

All SQL lives here and ONLY here. No database access outside this module.
Each repo implements one of the kernel storage interfaces.
"""

from backend.repos.block_type_repo import BlockTypeRepo
from backend.repos.page_repo import PageRepo
from backend.repos.theme_repo import ThemeRepo

__all__ = [
    "PageRepo",
    "ThemeRepo",
    "BlockTypeRepo",
]
