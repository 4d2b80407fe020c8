"""
Page Builder Kernel: Default Content

Seed data for a fresh install and for new tenants:
  - DEFAULT_BLOCK_TYPES: the stock block palette (seeded by migration 001)
  - DEFAULT_THEME_SETTINGS: colors, fonts and layout of the starter theme
  - default_pages(): home, about and contact pages built from the stock blocks
  - create_default_site(): install the starter theme and pages for a tenant
"""

from __future__ import annotations

import copy
import logging
from typing import Any
from uuid import UUID

from pagebuilder.kernel.errors import DuplicateSlug, DuplicateThemeName
from pagebuilder.kernel.storage import PageStorage
from pagebuilder.kernel.themes import ThemeService
from pagebuilder.kernel.types import BlockType, Page, Theme

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Block types
# ---------------------------------------------------------------------------

_HERO = """<section class="hero" style="background-image: url({{backgroundImage}}); background-size: cover; background-position: center; height: {{height}}; display: flex; align-items: center; justify-content: center; color: {{textColor}};">
  <div class="hero-content" style="text-align: center; max-width: 800px; padding: 40px;">
    <h1 style="font-size: 3rem; margin-bottom: 1rem;">{{title}}</h1>
    <p style="font-size: 1.5rem; margin-bottom: 2rem;">{{subtitle}}</p>
    {{#if buttonText}}
    <a href="{{buttonLink}}" class="btn btn-primary" style="padding: 15px 40px; background: {{buttonColor}}; color: white; text-decoration: none; border-radius: 5px; font-size: 1.2rem;">{{buttonText}}</a>
    {{/if}}
  </div>
</section>"""

_TWO_COLUMN = """<section class="two-column" style="display: grid; grid-template-columns: 1fr 1fr; gap: 40px; padding: 60px 20px; max-width: 1200px; margin: 0 auto;">
  <div class="column-left">
    <img src="{{leftImage}}" alt="{{leftImageAlt}}" style="width: 100%; border-radius: 8px;">
  </div>
  <div class="column-right" style="display: flex; flex-direction: column; justify-content: center;">
    <h2 style="font-size: 2rem; margin-bottom: 1rem;">{{title}}</h2>
    <p style="font-size: 1.1rem; line-height: 1.6; color: #666;">{{description}}</p>
  </div>
</section>"""

_TEXT = """<div class="text-block" style="max-width: {{maxWidth}}; margin: 0 auto; padding: 40px 20px;">
  <h2 style="font-size: {{headingSize}}; color: {{headingColor}}; margin-bottom: 1rem;">{{heading}}</h2>
  <div style="font-size: {{textSize}}; line-height: 1.6; color: {{textColor}};">{{content}}</div>
</div>"""

_CALL_TO_ACTION = """<section class="cta" style="background: {{backgroundColor}}; color: {{textColor}}; text-align: center; padding: 80px 20px;">
  <h2 style="font-size: 2.5rem; margin-bottom: 1rem;">{{title}}</h2>
  <p style="font-size: 1.2rem; margin-bottom: 2rem;">{{description}}</p>
  <a href="{{buttonLink}}" class="btn" style="padding: 15px 40px; background: {{buttonColor}}; color: white; text-decoration: none; border-radius: 5px; font-size: 1.1rem;">{{buttonText}}</a>
</section>"""

_IMAGE = """<div class="image-block" style="text-align: center; padding: 40px 20px;">
  <img src="{{src}}" alt="{{alt}}" style="max-width: {{maxWidth}}; width: 100%; height: auto; border-radius: {{borderRadius}};">
  {{#if caption}}
  <p style="margin-top: 1rem; color: #666; font-style: italic;">{{caption}}</p>
  {{/if}}
</div>"""

_GALLERY = """<div class="gallery" style="display: grid; grid-template-columns: repeat({{columns}}, 1fr); gap: {{gap}}; padding: 40px 20px; max-width: 1200px; margin: 0 auto;">
  {{#each images}}
  <div class="gallery-item">
    <img src="{{this.src}}" alt="{{this.alt}}" style="width: 100%; height: {{../height}}; object-fit: cover; border-radius: 8px;">
  </div>
  {{/each}}
</div>"""

_VIDEO = """<div class="video-block" style="max-width: {{maxWidth}}; margin: 0 auto; padding: 40px 20px;">
  {{#if youtubeId}}
  <iframe width="100%" height="{{height}}" src="https://www.youtube.com/embed/{{youtubeId}}" frameborder="0" allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture" allowfullscreen></iframe>
  {{else}}
  <video width="100%" height="{{height}}" controls>
    <source src="{{videoUrl}}" type="video/mp4">
  </video>
  {{/if}}
</div>"""

_PRODUCT_GRID = """<div class="product-grid" style="display: grid; grid-template-columns: repeat({{columns}}, 1fr); gap: 30px; padding: 40px 20px; max-width: 1200px; margin: 0 auto;" data-block-type="product-grid" data-config='{{jsonConfig}}'>
  <!-- Products loaded dynamically via JavaScript -->
</div>"""

_FEATURED_PRODUCT = """<section class="featured-product" style="display: grid; grid-template-columns: 1fr 1fr; gap: 40px; padding: 60px 20px; max-width: 1200px; margin: 0 auto;" data-block-type="featured-product" data-product-id="{{productId}}">
  <!-- Product loaded dynamically -->
</section>"""

_HEADER = """<header style="background: {{backgroundColor}}; padding: 20px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);">
  <div style="max-width: 1200px; margin: 0 auto; display: flex; justify-content: space-between; align-items: center;">
    <div class="logo">
      <img src="{{logoUrl}}" alt="{{siteName}}" style="height: {{logoHeight}};">
    </div>
    <nav>
      {{#each menuItems}}
      <a href="{{this.link}}" style="margin-left: 30px; color: {{../linkColor}}; text-decoration: none; font-weight: 500;">{{this.label}}</a>
      {{/each}}
    </nav>
  </div>
</header>"""

_FOOTER = """<footer style="background: {{backgroundColor}}; color: {{textColor}}; padding: 60px 20px; margin-top: 80px;">
  <div style="max-width: 1200px; margin: 0 auto; display: grid; grid-template-columns: repeat(3, 1fr); gap: 40px;">
    <div>
      <h3 style="margin-bottom: 1rem;">About</h3>
      <p style="line-height: 1.6;">{{aboutText}}</p>
    </div>
    <div>
      <h3 style="margin-bottom: 1rem;">Quick Links</h3>
      {{#each links}}
      <p><a href="{{this.url}}" style="color: {{../linkColor}}; text-decoration: none;">{{this.text}}</a></p>
      {{/each}}
    </div>
    <div>
      <h3 style="margin-bottom: 1rem;">Contact</h3>
      <p>{{contactEmail}}</p>
      <p>{{contactPhone}}</p>
    </div>
  </div>
  <div style="text-align: center; margin-top: 40px; padding-top: 20px; border-top: 1px solid rgba(255,255,255,0.1);">
    <p>&copy; {{year}} {{companyName}}. All rights reserved.</p>
  </div>
</footer>"""


def _string_schema(*fields: str) -> dict[str, Any]:
    return {"type": "object", "properties": {f: {"type": "string"} for f in fields}}


DEFAULT_BLOCK_TYPES: list[BlockType] = [
    # Layout
    BlockType(
        name="hero",
        category="layout",
        icon="layout-grid",
        template=_HERO,
        default_config={
            "title": "Welcome to our store",
            "subtitle": "Discover amazing products",
            "backgroundImage": "/assets/hero-default.jpg",
            "height": "600px",
            "textColor": "#ffffff",
            "buttonText": "Shop Now",
            "buttonLink": "/products",
            "buttonColor": "#667eea",
        },
        schema=_string_schema(
            "title", "subtitle", "backgroundImage", "height", "textColor", "buttonText", "buttonLink", "buttonColor"
        ),
    ),
    BlockType(
        name="section-two-column",
        category="layout",
        icon="columns",
        template=_TWO_COLUMN,
        default_config={
            "title": "Our Story",
            "description": "We are passionate about delivering quality products...",
            "leftImage": "/assets/placeholder.jpg",
            "leftImageAlt": "Company image",
        },
        schema=_string_schema("title", "description", "leftImage", "leftImageAlt"),
    ),
    BlockType(
        name="header",
        category="layout",
        icon="menu",
        template=_HEADER,
        default_config={
            "siteName": "My Store",
            "logoUrl": "/assets/logo.png",
            "logoHeight": "40px",
            "backgroundColor": "#ffffff",
            "linkColor": "#333333",
            "menuItems": [
                {"label": "Home", "link": "/"},
                {"label": "Products", "link": "/products"},
                {"label": "About", "link": "/about"},
                {"label": "Contact", "link": "/contact"},
            ],
        },
        schema={"type": "object"},
    ),
    BlockType(
        name="footer",
        category="layout",
        icon="layout-list",
        template=_FOOTER,
        default_config={
            "backgroundColor": "#1a202c",
            "textColor": "#ffffff",
            "linkColor": "#667eea",
            "aboutText": "We are committed to providing the best products and service.",
            "contactEmail": "hello@example.com",
            "contactPhone": "+1 234 567 890",
            "companyName": "My Store",
            "links": [
                {"text": "Privacy Policy", "url": "/privacy"},
                {"text": "Terms of Service", "url": "/terms"},
            ],
        },
        schema={"type": "object"},
    ),
    # Content
    BlockType(
        name="text",
        category="content",
        icon="type",
        template=_TEXT,
        default_config={
            "heading": "About Us",
            "content": "<p>Your content here...</p>",
            "maxWidth": "800px",
            "headingSize": "2rem",
            "headingColor": "#333",
            "textSize": "1rem",
            "textColor": "#666",
        },
        schema=_string_schema("heading", "content", "maxWidth", "headingSize", "textSize"),
    ),
    BlockType(
        name="call-to-action",
        category="content",
        icon="megaphone",
        template=_CALL_TO_ACTION,
        default_config={
            "title": "Ready to get started?",
            "description": "Join thousands of happy customers",
            "buttonText": "Sign Up Now",
            "buttonLink": "/signup",
            "backgroundColor": "#667eea",
            "textColor": "#ffffff",
            "buttonColor": "#ffffff",
        },
        schema={"type": "object"},
    ),
    # Media
    BlockType(
        name="image",
        category="media",
        icon="image",
        template=_IMAGE,
        default_config={
            "src": "/assets/placeholder.jpg",
            "alt": "Image description",
            "maxWidth": "100%",
            "borderRadius": "0px",
            "caption": "",
        },
        schema={"type": "object"},
    ),
    BlockType(
        name="gallery",
        category="media",
        icon="images",
        template=_GALLERY,
        default_config={
            "columns": "3",
            "gap": "20px",
            "height": "300px",
            "images": [
                {"src": "/assets/placeholder.jpg", "alt": "Image 1"},
                {"src": "/assets/placeholder.jpg", "alt": "Image 2"},
                {"src": "/assets/placeholder.jpg", "alt": "Image 3"},
            ],
        },
        schema={"type": "object"},
    ),
    BlockType(
        name="video",
        category="media",
        icon="video",
        template=_VIDEO,
        default_config={"videoUrl": "", "youtubeId": "", "height": "400px", "maxWidth": "1000px"},
        schema={"type": "object"},
    ),
    # Ecommerce
    BlockType(
        name="product-grid",
        category="ecommerce",
        icon="shopping-bag",
        template=_PRODUCT_GRID,
        default_config={"columns": "3", "limit": "6", "showPrice": True, "showAddToCart": True},
        schema={"type": "object"},
    ),
    BlockType(
        name="featured-product",
        category="ecommerce",
        icon="star",
        template=_FEATURED_PRODUCT,
        default_config={"productId": "1"},
        schema={"type": "object"},
    ),
]


# ---------------------------------------------------------------------------
# Theme and starter pages
# ---------------------------------------------------------------------------

DEFAULT_THEME_NAME = "Default Theme"

DEFAULT_THEME_SETTINGS: dict[str, Any] = {
    "colors": {
        "primary": "#667eea",
        "secondary": "#764ba2",
        "text": "#333333",
        "background": "#ffffff",
    },
    "fonts": {
        "heading": "Inter, sans-serif",
        "body": "Inter, sans-serif",
    },
    "layout": {
        "maxWidth": "1200px",
    },
}

_HEADER_CONFIG: dict[str, Any] = {
    "siteName": "My Store",
    "logoUrl": "/assets/logo.png",
    "logoHeight": "40px",
    "backgroundColor": "#ffffff",
    "linkColor": "#333333",
    "menuItems": [
        {"label": "Home", "link": "/"},
        {"label": "Products", "link": "/products"},
        {"label": "About", "link": "/about"},
        {"label": "Contact", "link": "/contact"},
    ],
}

_FOOTER_CONFIG: dict[str, Any] = {
    "backgroundColor": "#1a202c",
    "textColor": "#ffffff",
    "linkColor": "#667eea",
    "aboutText": "We are committed to providing the best products and excellent customer service.",
    "contactEmail": "hello@example.com",
    "contactPhone": "+1 234 567 890",
    "companyName": "My Store",
    "links": [
        {"text": "Privacy Policy", "url": "/privacy"},
        {"text": "Terms of Service", "url": "/terms"},
    ],
}

_TEXT_STYLE: dict[str, Any] = {
    "maxWidth": "800px",
    "headingSize": "2rem",
    "headingColor": "#333",
    "textSize": "1.1rem",
    "textColor": "#666",
}


def _hero(title: str, subtitle: str, image: str, height: str, button_text: str = "", button_link: str = "") -> dict:
    return {
        "type": "hero",
        "config": {
            "title": title,
            "subtitle": subtitle,
            "backgroundImage": image,
            "height": height,
            "textColor": "#ffffff",
            "buttonText": button_text,
            "buttonLink": button_link,
            "buttonColor": "#667eea",
        },
    }


def default_pages() -> list[dict[str, Any]]:
    """Starter pages for a new tenant. Returns fresh copies on every call."""
    header = {"type": "header", "config": copy.deepcopy(_HEADER_CONFIG)}
    footer = {"type": "footer", "config": copy.deepcopy(_FOOTER_CONFIG)}

    home_footer = copy.deepcopy(footer)
    home_footer["config"]["links"].append({"text": "Shipping Policy", "url": "/shipping"})

    return [
        {
            "slug": "home",
            "title": "Home",
            "meta_description": "Welcome to our store",
            "blocks": [
                copy.deepcopy(header),
                _hero(
                    "Welcome to Our Store",
                    "Discover amazing products crafted with love",
                    "https://images.unsplash.com/photo-1441986300917-64674bd600d8?w=1600",
                    "600px",
                    "Shop Now",
                    "/products",
                ),
                {
                    "type": "product-grid",
                    "config": {"columns": "3", "limit": "6", "showPrice": True, "showAddToCart": True},
                },
                {
                    "type": "call-to-action",
                    "config": {
                        "title": "Ready to Get Started?",
                        "description": "Join thousands of happy customers",
                        "buttonText": "Shop Now",
                        "buttonLink": "/products",
                        "backgroundColor": "#667eea",
                        "textColor": "#ffffff",
                        "buttonColor": "#ffffff",
                    },
                },
                home_footer,
            ],
        },
        {
            "slug": "about",
            "title": "About Us",
            "meta_description": "Learn more about our company",
            "blocks": [
                copy.deepcopy(header),
                _hero(
                    "About Our Company",
                    "Our story, mission, and values",
                    "https://images.unsplash.com/photo-1522071820081-009f0129c71c?w=1600",
                    "400px",
                ),
                {
                    "type": "section-two-column",
                    "config": {
                        "title": "Our Story",
                        "description": (
                            "Founded in 2024, we started with a simple mission: to provide high-quality "
                            "products that make life better. Today, we serve thousands of happy customers worldwide."
                        ),
                        "leftImage": "https://images.unsplash.com/photo-1556761175-b413da4baf72?w=800",
                        "leftImageAlt": "Our team",
                    },
                },
                {
                    "type": "text",
                    "config": {
                        "heading": "Our Mission",
                        "content": (
                            "<p>We believe in creating products that are not only beautiful but also functional "
                            "and sustainable.</p><p>Customer satisfaction is at the heart of everything we do.</p>"
                        ),
                        **_TEXT_STYLE,
                    },
                },
                copy.deepcopy(footer),
            ],
        },
        {
            "slug": "contact",
            "title": "Contact Us",
            "meta_description": "Get in touch with us",
            "blocks": [
                copy.deepcopy(header),
                _hero(
                    "Get In Touch",
                    "We'd love to hear from you",
                    "https://images.unsplash.com/photo-1423666639041-f56000c27a9a?w=1600",
                    "400px",
                ),
                {
                    "type": "text",
                    "config": {
                        "heading": "Contact Information",
                        "content": (
                            "<p><strong>Email:</strong> hello@example.com</p>"
                            "<p><strong>Phone:</strong> +1 234 567 890</p>"
                            "<p><strong>Business Hours:</strong> Monday - Friday, 9:00 AM - 6:00 PM</p>"
                        ),
                        **_TEXT_STYLE,
                    },
                },
                copy.deepcopy(footer),
            ],
        },
    ]


async def create_default_site(
    tenant_id: UUID,
    themes: ThemeService,
    pages: PageStorage,
) -> tuple[Theme, list[Page]]:
    """
    Create the starter theme (active) and the published starter pages for a
    tenant. Safe to run again: an existing default theme is reused as it is
    (the tenant may have activated another theme since), and pages whose
    slug already exists are left alone.

    Returns:
        The default theme and the pages created by this call
    """
    try:
        theme = await themes.create_theme(
            tenant_id,
            DEFAULT_THEME_NAME,
            settings=copy.deepcopy(DEFAULT_THEME_SETTINGS),
            is_active=True,
        )
    except DuplicateThemeName:
        theme = await themes.get_theme_by_name(tenant_id, DEFAULT_THEME_NAME)
        if theme is None:
            raise
        logger.info("Tenant %s already has the default theme, keeping it", tenant_id)

    created: list[Page] = []
    for seed in default_pages():
        try:
            page = await pages.create_page(
                tenant_id,
                slug=seed["slug"],
                title=seed["title"],
                blocks=seed["blocks"],
                meta_description=seed["meta_description"],
                theme_id=theme.id,
                is_published=True,
            )
        except DuplicateSlug:
            logger.info("Tenant %s already has a %r page, keeping it", tenant_id, seed["slug"])
            continue
        created.append(page)

    logger.info("Created default theme and %d pages for tenant %s", len(created), tenant_id)
    return theme, created
