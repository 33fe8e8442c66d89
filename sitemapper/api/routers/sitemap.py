from fastapi import APIRouter, Depends, HTTPException, Request, Response

from sitemapper.services.context import SitemapContext
from sitemapper.services.discovery import SITEMAP_INTERNAL_TAG
from sitemapper.services.serializer import SITEMAP_MEDIA_TYPE

router = APIRouter(tags=["sitemap", SITEMAP_INTERNAL_TAG])


def get_sitemap_context(request: Request) -> SitemapContext:
    return request.app.state.sitemap


@router.get("/sitemap.xml")
def api_get_sitemap(ctx: SitemapContext = Depends(get_sitemap_context)):
    """Single sitemap, or a sitemap index once the entry count exceeds one shard."""
    ctx.ensure_scanned()
    registry = ctx.registry
    body = registry.index_document() if registry.requires_sharding() else registry.document()
    return Response(content=body, media_type=SITEMAP_MEDIA_TYPE)


@router.get("/sitemap-{page}.xml")
def api_get_sitemap_page(page: int, ctx: SitemapContext = Depends(get_sitemap_context)):
    ctx.ensure_scanned()
    if page < 1 or page > ctx.registry.shard_count():
        raise HTTPException(status_code=404, detail="Sitemap page not found")
    return Response(content=ctx.registry.page_document(page), media_type=SITEMAP_MEDIA_TYPE)
