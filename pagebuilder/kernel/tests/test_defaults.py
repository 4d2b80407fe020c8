"""
Default Content Tests

The stock block palette compiles, and the starter site renders with no
unknown or failing blocks.
"""

import pytest

from pagebuilder.kernel.defaults import (
    DEFAULT_BLOCK_TYPES,
    DEFAULT_THEME_NAME,
    create_default_site,
    default_pages,
)
from pagebuilder.kernel.registry import load_registry
from pagebuilder.kernel.renderer import render_document, render_page
from pagebuilder.kernel.themes import ThemeService
from pagebuilder.kernel.types import BLOCK_CATEGORIES


@pytest.fixture
def default_registry():
    return load_registry(DEFAULT_BLOCK_TYPES)


class TestDefaultBlockTypes:
    def test_all_compile_in_strict_mode(self, default_registry):
        assert len(default_registry) == 11
        assert default_registry.skipped == ()

    def test_categories_are_known(self):
        assert {b.category for b in DEFAULT_BLOCK_TYPES} <= BLOCK_CATEGORIES

    def test_names_are_unique(self):
        names = [b.name for b in DEFAULT_BLOCK_TYPES]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize("block_type", DEFAULT_BLOCK_TYPES, ids=lambda b: b.name)
    def test_default_config_renders(self, default_registry, block_type):
        html = render_page([{"type": block_type.name, "config": block_type.default_config}], default_registry)
        assert html
        assert "<!-- Error rendering" not in html
        assert "<!-- Unknown block type" not in html

    def test_gallery_reads_parent_height(self, default_registry):
        config = {"columns": "2", "gap": "8px", "height": "120px", "images": [{"src": "/a.jpg", "alt": "A"}]}
        html = render_page([{"type": "gallery", "config": config}], default_registry)
        assert 'src="/a.jpg"' in html
        assert "height: 120px" in html

    def test_video_prefers_youtube(self, default_registry):
        html = render_page(
            [{"type": "video", "config": {"youtubeId": "abc123", "height": "300px", "maxWidth": "800px"}}],
            default_registry,
        )
        assert "youtube.com/embed/abc123" in html
        assert "<video" not in html

    def test_footer_uses_year(self, default_registry):
        html = render_page([{"type": "footer", "config": {"companyName": "Acme"}}], default_registry, year=2031)
        assert "&copy; 2031 Acme." in html

    def test_product_grid_carries_raw_config(self, default_registry):
        html = render_page([{"type": "product-grid", "config": {"limit": 4}}], default_registry)
        assert """data-config='{"limit":4}'""" in html

    def test_product_grid_config_stays_inside_attribute(self, default_registry):
        config = {"title": "x'><script>alert(1)</script>", "limit": 4}
        html = render_page([{"type": "product-grid", "config": config}], default_registry)
        assert "<script>alert(1)</script>" not in html
        assert "\\u0027\\u003e\\u003cscript\\u003e" in html


class TestDefaultSite:
    def test_default_pages_are_independent_copies(self):
        first = default_pages()
        first[0]["blocks"][0]["config"]["siteName"] = "changed"
        assert default_pages()[0]["blocks"][0]["config"]["siteName"] == "My Store"

    def test_default_pages_render_cleanly(self, default_registry):
        for page in default_pages():
            html = render_page(page["blocks"], default_registry)
            assert "<!--" not in html.replace("<!-- Products loaded dynamically via JavaScript -->", "")

    async def test_create_default_site(self, storage, tenant_id, default_registry):
        theme, pages = await create_default_site(tenant_id, ThemeService(storage), storage)

        assert theme.name == DEFAULT_THEME_NAME
        assert (await storage.get_active_theme(tenant_id)).id == theme.id
        assert sorted(p.slug for p in pages) == ["about", "contact", "home"]
        assert all(p.is_published and p.theme_id == theme.id for p in pages)

        home = await storage.get_published_page(tenant_id, "home")
        html = render_document(home, default_registry, theme)
        assert "<title>Home</title>" in html
        assert "--colors-primary: #667eea;" in html
        assert "Welcome to Our Store" in html

    async def test_create_default_site_twice(self, storage, tenant_id):
        themes = ThemeService(storage)
        first, _ = await create_default_site(tenant_id, themes, storage)
        other = await themes.create_theme(tenant_id, "Dark", is_active=True)

        again, pages = await create_default_site(tenant_id, themes, storage)

        assert again.id == first.id
        assert pages == []
        assert len(await storage.list_pages(tenant_id)) == 3
        assert [t.name for t in await storage.list_themes(tenant_id) if t.name == DEFAULT_THEME_NAME] == [DEFAULT_THEME_NAME]
        assert (await storage.get_active_theme(tenant_id)).id == other.id
