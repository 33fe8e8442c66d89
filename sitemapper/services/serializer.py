"""sitemaps.org XML rendering.

Pure functions only: no state, no I/O. Inputs are raw, unescaped text; a value
that already contains entity references is escaped again.
"""

from __future__ import annotations

from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from sitemapper.models.sitemap import SitemapUrl

SITEMAP_MEDIA_TYPE = "application/xml"

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XHTML_NS = "http://www.w3.org/1999/xhtml"

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
URLSET_OPEN = f'<urlset xmlns="{SITEMAP_NS}"'
XHTML_NAMESPACE = f'\n        xmlns:xhtml="{XHTML_NS}"'
URLSET_CLOSE = "</urlset>\n"
SITEMAP_INDEX_OPEN = f'<sitemapindex xmlns="{SITEMAP_NS}">\n'
SITEMAP_INDEX_CLOSE = "</sitemapindex>\n"

_XML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "'": "&apos;",
    '"': "&quot;",
    ">": "&gt;",
    "<": "&lt;",
})


def escape_xml(value: Optional[str]) -> str:
    """Escape the five XML special characters in one pass. None becomes ''."""
    if value is None:
        return ""
    return str(value).translate(_XML_ESCAPES)


def format_lastmod(lastmod: datetime) -> str:
    # W3C Datetime: date only at midnight, otherwise seconds precision, no zone
    if lastmod.time() == time(0, 0):
        return lastmod.date().isoformat()
    return lastmod.replace(microsecond=0, tzinfo=None).isoformat()


def format_priority(priority: float) -> str:
    # half-up on the shortest decimal form, so 0.25 -> 0.3
    return str(Decimal(repr(float(priority))).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def strip_trailing_slash(url: Optional[str]) -> Optional[str]:
    if url and url.endswith("/"):
        return url[:-1]
    return url


def shard_filename(n: int) -> str:
    return f"sitemap-{n}.xml"


def _append_url(out: List[str], url: SitemapUrl) -> None:
    out.append("  <url>\n")
    out.append(f"    <loc>{escape_xml(url.loc)}</loc>\n")
    for hreflang, href in url.alternates.items():
        out.append(
            f'    <xhtml:link rel="alternate" hreflang="{escape_xml(hreflang)}" href="{escape_xml(href)}"/>\n'
        )
    if url.lastmod is not None:
        out.append(f"    <lastmod>{format_lastmod(url.lastmod)}</lastmod>\n")
    if url.changefreq is not None:
        out.append(f"    <changefreq>{url.changefreq.value}</changefreq>\n")
    if url.priority is not None:
        out.append(f"    <priority>{format_priority(url.priority)}</priority>\n")
    out.append("  </url>\n")


def render_document(entries: Iterable[SitemapUrl]) -> str:
    """Render a <urlset> document for the entries, in the order given.

    The xhtml namespace is declared only when at least one entry has alternates.
    """
    items: Sequence[SitemapUrl] = entries if isinstance(entries, (list, tuple)) else list(entries)
    has_alternates = any(u.alternates for u in items)

    out: List[str] = [XML_HEADER, URLSET_OPEN]
    if has_alternates:
        out.append(XHTML_NAMESPACE)
    out.append(">\n")
    for url in items:
        _append_url(out, url)
    out.append(URLSET_CLOSE)
    return "".join(out)


def render_index(shard_count: int, base_url: str) -> str:
    """Render a <sitemapindex> referencing shards 1..shard_count under base_url."""
    base = strip_trailing_slash(base_url) or ""
    out: List[str] = [XML_HEADER, SITEMAP_INDEX_OPEN]
    for n in range(1, shard_count + 1):
        out.append("  <sitemap>\n")
        out.append(f"    <loc>{escape_xml(f'{base}/{shard_filename(n)}')}</loc>\n")
        out.append("  </sitemap>\n")
    out.append(SITEMAP_INDEX_CLOSE)
    return "".join(out)
