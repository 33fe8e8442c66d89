from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sitemapper.config import SitemapSettings
from sitemapper.models.sitemap import ChangeFrequency, SitemapUrl
from sitemapper.services.locale_builder import LocaleUrlBuilder

logger = logging.getLogger(__name__)

_LASTMOD_DATETIME_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M")


@dataclass(frozen=True)
class RouteMetadata:
    """Per-path overrides supplied by a producer. ``None`` means use the settings default."""

    priority: Optional[float] = None
    changefreq: Optional[ChangeFrequency] = None
    lastmod: Optional[str] = None
    locales: Tuple[str, ...] = field(default_factory=tuple)


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM[:SS[.ffffff]]``.

    Anything else, including values with a zone offset, is treated as absent.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    formats = _LASTMOD_DATETIME_FORMATS if "T" in s else ("%Y-%m-%d",)
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    logger.warning("Failed to parse lastmod value '%s': expected YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS", s)
    return None


def build_entries(
    path: str,
    metadata: Optional[RouteMetadata],
    builder: LocaleUrlBuilder,
    settings: SitemapSettings,
    *,
    detected_locales: Optional[Sequence[str]] = None,
) -> List[SitemapUrl]:
    """Translate one ``(path, metadata)`` pair into sitemap entries.

    Without locales a single entry is produced. With locales there is one
    entry per locale, all sharing the same alternates map.
    """
    meta = metadata or RouteMetadata()
    priority = meta.priority if meta.priority is not None else settings.default_priority
    changefreq = meta.changefreq if meta.changefreq is not None else settings.default_changefreq
    lastmod = parse_lastmod(meta.lastmod)

    locales = builder.resolve_locales(meta.locales, detected_locales)
    if not locales:
        return [SitemapUrl(builder.build_url(path), lastmod=lastmod, changefreq=changefreq, priority=priority)]

    alternates = builder.build_alternates(path, locales)
    out: List[SitemapUrl] = []
    seen = set()
    for locale in locales:
        loc = builder.build_localized_url(path, locale)
        if loc in seen:
            continue
        seen.add(loc)
        out.append(
            SitemapUrl(loc, lastmod=lastmod, changefreq=changefreq, priority=priority, alternates=alternates)
        )
    return out
