from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from sitemapper.api.routers.sitemap import get_sitemap_context
from sitemapper.models.entries import EntryCreate, EntryOut, EntryPage, SitemapStats
from sitemapper.models.sitemap import SitemapUrl
from sitemapper.services.context import SitemapContext
from sitemapper.services.discovery import SITEMAP_INTERNAL_TAG

router = APIRouter(prefix="/sitemap", tags=["sitemap", SITEMAP_INTERNAL_TAG])


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware timestamps are converted to UTC before the offset is dropped."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@router.get("/entries", response_model=EntryPage)
def api_list_entries(page: int = 1, size: int = 100, ctx: SitemapContext = Depends(get_sitemap_context)):
    size = max(1, min(int(size or 100), 1000))
    items = [EntryOut(**e.to_dict()) for e in ctx.registry.page(page, size)]
    return EntryPage(page=page, size=size, total=ctx.registry.size(), items=items)


@router.post("/entries", status_code=201, response_model=EntryOut)
def api_add_entry(payload: EntryCreate, ctx: SitemapContext = Depends(get_sitemap_context)):
    try:
        entry = SitemapUrl(
            payload.loc,
            lastmod=_to_naive_utc(payload.lastmod),
            changefreq=payload.changefreq,
            priority=payload.priority,
            alternates=payload.alternates,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    ctx.registry.add(entry)
    return EntryOut(**entry.to_dict())


@router.delete("/entries")
def api_remove_entry(loc: str, ctx: SitemapContext = Depends(get_sitemap_context)):
    if not ctx.registry.remove(loc):
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"status": "ok", "removed": loc}


@router.get("/stats", response_model=SitemapStats)
def api_get_stats(ctx: SitemapContext = Depends(get_sitemap_context)):
    registry = ctx.registry
    return SitemapStats(
        size=registry.size(),
        shard_count=registry.shard_count(),
        requires_sharding=registry.requires_sharding(),
        max_entries_per_shard=registry.max_entries_per_shard,
        scanned=ctx.scanner.scanned,
    )
