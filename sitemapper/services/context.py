from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from sitemapper.config import InitializationType, SitemapSettings
from sitemapper.services.discovery import RouteScanner
from sitemapper.services.locale_builder import LocaleUrlBuilder
from sitemapper.services.registry import SitemapRegistry

logger = logging.getLogger(__name__)


@dataclass
class SitemapContext:
    """Everything a running application shares about its sitemap.

    Built once at startup and passed by reference; ``close()`` at shutdown.
    """

    settings: SitemapSettings
    builder: LocaleUrlBuilder
    registry: SitemapRegistry
    scanner: RouteScanner

    def ensure_scanned(self) -> None:
        if self.settings.initialization == InitializationType.LAZY and not self.scanner.scanned:
            self.scanner.scan()

    def startup(self) -> None:
        if self.settings.initialization == InitializationType.EAGER:
            self.scanner.scan()

    def close(self) -> None:
        self.registry.clear()
        logger.debug("Sitemap context closed")


def create_context(
    settings: SitemapSettings,
    routes_provider: Optional[Callable[[], Iterable[Any]]] = None,
) -> SitemapContext:
    builder = LocaleUrlBuilder(settings)
    registry = SitemapRegistry.from_settings(settings)
    scanner = RouteScanner(routes_provider or (lambda: []), registry, builder, settings)
    return SitemapContext(settings=settings, builder=builder, registry=registry, scanner=scanner)
