"""
Page builder FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend import db
from backend.config import settings
from backend.deps import block_type_repo
from backend.routes import block_types as block_type_routes
from backend.routes import pages as page_routes
from backend.routes import site as site_routes
from backend.routes import storefront as storefront_routes
from backend.routes import themes as theme_routes
from backend.services.block_registry import block_registry
from pagebuilder.kernel.errors import PersistenceError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Initialize database pool
    - Compile the block type registry
    - Close database pool on shutdown
    """
    # Startup
    await db.init_pool()
    logger.info("Database pool initialized")

    registry = await block_registry.reload(block_type_repo)
    logger.info("Block registry ready: %s", ", ".join(registry.names()) or "(empty)")

    yield

    # Shutdown
    await db.close_pool()
    logger.info("Database pool closed")


app = FastAPI(
    title="Page Builder",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Storage failures surface as 503; nothing was partially written."""
    logger.error("Persistence error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The data store is unavailable. Please try again."},
    )


# Register routes
app.include_router(page_routes.router)
app.include_router(theme_routes.router)
app.include_router(block_type_routes.router)
app.include_router(storefront_routes.router)
app.include_router(site_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
