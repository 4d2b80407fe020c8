"""
Public storefront routes.

GET /api/storefront/page/{slug} returns a published page and its rendered
blocks as JSON. GET /s/{slug} serves the same page as a full HTML document.
The tenant comes from the X-Tenant-Subdomain header or the `subdomain`
query parameter.
"""

from __future__ import annotations

import hashlib
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import HTMLResponse, Response

from backend.deps import get_page_storage, get_registry, get_theme_storage
from backend.models.page import StorefrontPage, StorefrontPageResponse
from pagebuilder.kernel.registry import BlockTypeRegistry
from pagebuilder.kernel.renderer import render_document, render_page
from pagebuilder.kernel.storage import PageStorage, ThemeStorage
from pagebuilder.kernel.types import Page, Tenant

router = APIRouter(tags=["storefront"])

# Cache-Control TTL: 1 minute browser, 5 minutes shared cache, 1 hour stale-while-revalidate
_CACHE_CONTROL = "public, max-age=60, s-maxage=300, stale-while-revalidate=3600"


async def _resolve_published_page(storage: PageStorage, subdomain: str | None, slug: str) -> tuple[Tenant, Page]:
    if not subdomain:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subdomain required.")

    tenant = await storage.get_tenant_by_subdomain(subdomain)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found.")

    page = await storage.get_published_page(tenant.id, slug)
    if not page:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found.")

    return tenant, page


@router.get("/api/storefront/page/{slug}", status_code=200)
async def storefront_page(
    slug: str,
    x_tenant_subdomain: Annotated[str | None, Header()] = None,
    subdomain: Annotated[str | None, Query()] = None,
    storage: PageStorage = Depends(get_page_storage),
    registry: BlockTypeRegistry = Depends(get_registry),
) -> StorefrontPageResponse:
    """Render a published page for a storefront client."""
    tenant, page = await _resolve_published_page(storage, x_tenant_subdomain or subdomain, slug)
    return StorefrontPageResponse(
        page=StorefrontPage(
            title=page.title,
            slug=page.slug,
            meta_description=page.meta_description,
            seo_settings=page.seo_settings,
        ),
        html=render_page(page.blocks, registry),
        store_name=tenant.store_name,
    )


@router.get("/s/{slug}", response_class=HTMLResponse)
async def serve_published_page(
    slug: str,
    x_tenant_subdomain: Annotated[str | None, Header()] = None,
    subdomain: Annotated[str | None, Query()] = None,
    storage: PageStorage = Depends(get_page_storage),
    themes: ThemeStorage = Depends(get_theme_storage),
    registry: BlockTypeRegistry = Depends(get_registry),
) -> Response:
    """
    Serve a published page as a complete HTML document, styled with the
    page's theme (or the tenant's active theme when the page has none).

    Cache headers:
    - Cache-Control: public, short TTLs since pages change on every publish
    - ETag: MD5 of the HTML content for conditional requests
    """
    try:
        tenant, page = await _resolve_published_page(storage, x_tenant_subdomain or subdomain, slug)
    except HTTPException as e:
        return HTMLResponse(
            content=f"<html><body><h1>{e.status_code}: {e.detail}</h1></body></html>",
            status_code=e.status_code,
        )

    theme = None
    if page.theme_id is not None:
        theme = await themes.get_theme(tenant.id, page.theme_id)
    if theme is None:
        theme = await themes.get_active_theme(tenant.id)

    html_bytes = render_document(page, registry, theme).encode("utf-8")
    etag = f'"{hashlib.md5(html_bytes, usedforsecurity=False).hexdigest()}"'

    return Response(
        content=html_bytes,
        media_type="text/html; charset=utf-8",
        headers={
            "Cache-Control": _CACHE_CONTROL,
            "ETag": etag,
            "X-Content-Type-Options": "nosniff",
        },
    )
