from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from sitemapper.config import LocaleUrlPattern, SitemapSettings
from sitemapper.services.serializer import strip_trailing_slash

logger = logging.getLogger(__name__)

X_DEFAULT = "x-default"


def _ensure_leading_slash(path: Optional[str]) -> str:
    if not path:
        return "/"
    return path if path.startswith("/") else "/" + path


class LocaleUrlBuilder:
    """Resolves locale codes for an entry and builds locale-qualified URLs.

    Locale resolution priority chain:
      1. explicit per-entry override
      2. configured ``locales``
      3. whatever the producer detected itself (default: nothing)
    """

    def __init__(self, settings: SitemapSettings) -> None:
        self.settings = settings

    @property
    def base_url(self) -> str:
        return strip_trailing_slash(self.settings.base_url) or ""

    def resolve_locales(
        self,
        explicit_override: Optional[Sequence[str]] = None,
        detected: Optional[Sequence[str]] = None,
    ) -> List[str]:
        if explicit_override:
            logger.debug("Using explicit locales: %s", list(explicit_override))
            return list(explicit_override)
        if self.settings.locales:
            logger.debug("Using configured locales: %s", list(self.settings.locales))
            return list(self.settings.locales)
        if detected:
            logger.debug("Using producer-detected locales: %s", list(detected))
            return list(detected)
        logger.debug("No locales resolved; set SITEMAP_LOCALES for multilingual sitemaps")
        return []

    def build_url(self, path: Optional[str]) -> str:
        return self.base_url + _ensure_leading_slash(path)

    def build_localized_url(self, path: Optional[str], locale: str) -> str:
        s = self.settings
        normal_path = _ensure_leading_slash(path)
        if s.omit_default_locale_in_url and locale is not None and locale == s.default_locale:
            return self.base_url + normal_path

        if s.locale_url_pattern == LocaleUrlPattern.QUERY_PARAM:
            full_url = self.base_url + normal_path
            separator = "&" if "?" in full_url else "?"
            return f"{full_url}{separator}{s.locale_query_param_name}={locale}"
        return f"{self.base_url}/{locale}{normal_path}"

    def build_alternates(self, path: Optional[str], locales: Optional[Sequence[str]]) -> Mapping[str, str]:
        """Return hreflang -> URL for every locale plus an ``x-default`` entry.

        First occurrence wins on duplicate codes. ``x-default`` points at the
        configured default locale when it is among ``locales``, else the first one.
        """
        if not locales:
            return MappingProxyType({})

        alternates: Dict[str, str] = {}
        for locale in locales:
            if locale not in alternates:
                alternates[locale] = self.build_localized_url(path, locale)

        default_locale = self.settings.default_locale
        x_default_locale = default_locale if default_locale in locales else locales[0]
        alternates[X_DEFAULT] = self.build_localized_url(path, x_default_locale)
        return MappingProxyType(alternates)
