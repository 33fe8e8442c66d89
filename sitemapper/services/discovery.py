"""Route discovery for FastAPI applications.

Walks the application's route table once and registers every eligible GET
endpoint with the sitemap registry.

Usage:
    from sitemapper.services.discovery import sitemap, sitemap_exclude

    @router.get("/about")
    @sitemap(priority=0.8, changefreq="weekly", locales=("en", "pt"))
    def about():
        ...
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, Callable, Iterable, List, Optional, Sequence

from fastapi.routing import APIRoute

from sitemapper.config import SitemapSettings
from sitemapper.models.sitemap import ChangeFrequency, SitemapUrl
from sitemapper.services.locale_builder import LocaleUrlBuilder
from sitemapper.services.producer import RouteMetadata, build_entries
from sitemapper.services.registry import SitemapRegistry

logger = logging.getLogger(__name__)

SITEMAP_ATTR = "__sitemap__"
SITEMAP_EXCLUDE_ATTR = "__sitemap_exclude__"
SITEMAP_INTERNAL_TAG = "sitemap-internal"

_PATH_VARIABLE = re.compile(r"\{[^}]+\}")


def sitemap(
    *,
    priority: Optional[float] = None,
    changefreq: Optional[Any] = None,
    lastmod: Optional[str] = None,
    locales: Sequence[str] = (),
) -> Callable:
    """Mark an endpoint for inclusion in the sitemap; unset values use the settings defaults."""
    if priority is not None and not 0.0 <= float(priority) <= 1.0:
        raise ValueError(f"priority must be between 0.0 and 1.0, got: {priority}")
    meta = RouteMetadata(
        priority=priority,
        changefreq=ChangeFrequency.parse(changefreq),
        lastmod=lastmod,
        locales=tuple(locales or ()),
    )

    def decorator(fn: Callable) -> Callable:
        setattr(fn, SITEMAP_ATTR, meta)
        return fn

    return decorator


def sitemap_exclude(fn: Callable) -> Callable:
    """Keep an endpoint out of the sitemap even when auto scan is on."""
    setattr(fn, SITEMAP_EXCLUDE_ATTR, True)
    return fn


class RouteScanner:
    def __init__(
        self,
        routes_provider: Callable[[], Iterable[Any]],
        registry: SitemapRegistry,
        builder: LocaleUrlBuilder,
        settings: SitemapSettings,
    ) -> None:
        self.routes_provider = routes_provider
        self.registry = registry
        self.builder = builder
        self.settings = settings
        self._scanned = False
        self._lock = threading.Lock()

    @property
    def scanned(self) -> bool:
        return self._scanned

    def scan(self) -> int:
        """Register all eligible routes. Runs at most once; returns the number of URLs added."""
        with self._lock:
            if self._scanned:
                logger.debug("Route scan already performed, skipping")
                return 0
            self._scanned = True

        logger.info("Scanning routes for sitemap registration...")
        discovered: List[SitemapUrl] = []
        for route in self.routes_provider():
            if not isinstance(route, APIRoute):
                continue
            meta = getattr(route.endpoint, SITEMAP_ATTR, None)
            if not self._should_include(route, meta):
                continue
            if _PATH_VARIABLE.search(route.path):
                logger.warning(
                    "Skipping route with path variables: %s (add these URLs via the registry directly)",
                    route.path,
                )
                continue
            discovered.extend(build_entries(route.path, meta, self.builder, self.settings))

        self.registry.add_all(discovered)
        logger.info("Sitemap route scan complete: %d URLs registered", len(discovered))
        return len(discovered)

    def _should_include(self, route: APIRoute, meta: Optional[RouteMetadata]) -> bool:
        if getattr(route.endpoint, SITEMAP_EXCLUDE_ATTR, False):
            return False
        if SITEMAP_INTERNAL_TAG in (route.tags or []):
            return False
        if meta is None and not self.settings.auto_scan:
            return False
        methods = route.methods or set()
        return not methods or any(m in self.settings.auto_scan_methods for m in methods)
