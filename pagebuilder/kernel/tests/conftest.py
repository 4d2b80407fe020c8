"""
Page builder kernel test configuration.

Kernel tests run on MemoryStorage with function-scoped event loops.
PostgreSQL-backed storage is exercised from backend/tests.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from pagebuilder.kernel.registry import load_registry
from pagebuilder.kernel.storage import MemoryStorage
from pagebuilder.kernel.types import BlockType


def make_block_type(name: str, template: str, category: str = "content", enabled: bool = True) -> BlockType:
    return BlockType(name=name, category=category, template=template, enabled=enabled)


SIMPLE_TYPES = [
    make_block_type("hero", "<h1>{{title}}</h1><p>{{subtitle}}</p>", category="layout"),
    make_block_type("text", "<h2>{{heading}}</h2><div>{{content}}</div>"),
    make_block_type("list", "<ul>{{#each items}}<li>{{this}}</li>{{/each}}</ul>"),
    make_block_type("json", "<div data-config='{{jsonConfig}}'></div>", category="ecommerce"),
    make_block_type("copyright", "<p>&copy; {{year}}</p>", category="layout"),
]


@pytest.fixture
def registry():
    return load_registry(SIMPLE_TYPES)


@pytest.fixture
def storage():
    return MemoryStorage(block_types=list(SIMPLE_TYPES))


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def editor_id():
    return uuid4()
