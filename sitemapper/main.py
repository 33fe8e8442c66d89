import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import APIRouter, FastAPI

from sitemapper.config import SitemapSettings, load_settings
from sitemapper.services.context import create_context

# Routers
from sitemapper.api.routers.sitemap import router as sitemap_router
from sitemapper.api.routers.entries import router as entries_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the eager route scan on startup and tear the sitemap context down on shutdown."""
    ctx = app.state.sitemap
    ctx.startup()
    try:
        yield
    finally:
        ctx.close()


def create_app(
    settings: Optional[SitemapSettings] = None,
    routers: Sequence[APIRouter] = (),
) -> FastAPI:
    """Build the application. Without explicit settings they are loaded from the environment.

    Run with: uvicorn sitemapper.main:create_app --factory
    """
    settings = settings or load_settings()
    app = FastAPI(title="Sitemapper", version="0.1", lifespan=lifespan)
    app.state.sitemap = create_context(settings, routes_provider=lambda: app.routes)
    for r in routers:
        app.include_router(r)

    if settings.enabled:
        app.include_router(sitemap_router)
        app.include_router(entries_router)
    else:
        logger.info("Sitemap disabled (SITEMAP_ENABLED=false); routes not mounted")
    return app
