"""Sitemap settings.

Configuration via environment variables (a ``.env`` file at the project root is
read first; variables already present in the environment win):

- SITEMAP_BASE_URL (required, e.g. https://example.com)
- SITEMAP_MAX_ENTRIES_PER_SHARD (default: 50000, the protocol ceiling)
- SITEMAP_DEFAULT_PRIORITY (default: 0.5)
- SITEMAP_DEFAULT_CHANGEFREQ (default: unset)
- SITEMAP_LOCALES (comma separated, default: empty)
- SITEMAP_LOCALE_URL_PATTERN (path_prefix | query_param, default: path_prefix)
- SITEMAP_LOCALE_QUERY_PARAM_NAME (default: lang)
- SITEMAP_DEFAULT_LOCALE (default: none)
- SITEMAP_OMIT_DEFAULT_LOCALE_IN_URL (default: false)
- SITEMAP_ENABLED, SITEMAP_AUTO_SCAN, SITEMAP_AUTO_SCAN_METHODS, SITEMAP_INITIALIZATION

Usage:
    from sitemapper.config import load_settings
    settings = load_settings(base_url="https://example.com")
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitemapper.models.sitemap import ChangeFrequency

MAX_ENTRIES_PER_SHARD = 50_000


class LocaleUrlPattern(str, Enum):
    PATH_PREFIX = "path_prefix"
    QUERY_PARAM = "query_param"


class InitializationType(str, Enum):
    """When the route scan runs: at startup, or on the first sitemap request."""

    EAGER = "eager"
    LAZY = "lazy"


class SitemapSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Absolute site URL used to build locations")
    max_entries_per_shard: int = Field(
        default=MAX_ENTRIES_PER_SHARD, ge=1, le=MAX_ENTRIES_PER_SHARD,
        description="Entries per sitemap document before an index is served",
    )
    default_priority: float = Field(default=0.5, ge=0.0, le=1.0)
    default_changefreq: Optional[ChangeFrequency] = None
    locales: Tuple[str, ...] = Field(default=(), description="Configured locale codes, in order")
    locale_url_pattern: LocaleUrlPattern = LocaleUrlPattern.PATH_PREFIX
    locale_query_param_name: str = "lang"
    default_locale: Optional[str] = None
    omit_default_locale_in_url: bool = False
    enabled: bool = True
    auto_scan: bool = False
    auto_scan_methods: Tuple[str, ...] = ("GET",)
    initialization: InitializationType = InitializationType.EAGER

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, v: str) -> str:
        s = (v or "").strip()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError(f"base_url must be an absolute http(s) URL, got: {v!r}")
        return s

    @field_validator("default_changefreq", mode="before")
    @classmethod
    def _parse_changefreq(cls, v: Any) -> Optional[ChangeFrequency]:
        return ChangeFrequency.parse(v)

    @field_validator("locales", "auto_scan_methods", mode="before")
    @classmethod
    def _split_list(cls, v: Any) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        return tuple(s.strip() for s in v if s and s.strip())

    @field_validator("auto_scan_methods")
    @classmethod
    def _upper_methods(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(m.upper() for m in v)

    @field_validator("locale_url_pattern", "initialization", mode="before")
    @classmethod
    def _lower_enum(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, Enum):
            return v.strip().lower().replace("-", "_")
        return v

    @field_validator("default_locale", mode="before")
    @classmethod
    def _blank_locale(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        s = str(v).strip()
        return s or None


_ENV_FIELDS: Dict[str, str] = {
    "SITEMAP_BASE_URL": "base_url",
    "SITEMAP_MAX_ENTRIES_PER_SHARD": "max_entries_per_shard",
    "SITEMAP_DEFAULT_PRIORITY": "default_priority",
    "SITEMAP_DEFAULT_CHANGEFREQ": "default_changefreq",
    "SITEMAP_LOCALES": "locales",
    "SITEMAP_LOCALE_URL_PATTERN": "locale_url_pattern",
    "SITEMAP_LOCALE_QUERY_PARAM_NAME": "locale_query_param_name",
    "SITEMAP_DEFAULT_LOCALE": "default_locale",
    "SITEMAP_OMIT_DEFAULT_LOCALE_IN_URL": "omit_default_locale_in_url",
    "SITEMAP_ENABLED": "enabled",
    "SITEMAP_AUTO_SCAN": "auto_scan",
    "SITEMAP_AUTO_SCAN_METHODS": "auto_scan_methods",
    "SITEMAP_INITIALIZATION": "initialization",
}


def _load_env_from_file(env_path: Optional[str] = None) -> None:
    """Load environment variables from a .env file at the project root if present.

    Only sets variables that aren't already present in the process environment.
    """
    if env_path is None:
        root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        env_path = os.path.join(root_dir, ".env")
    if not os.path.isfile(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            if "=" not in s:
                continue
            key, val = s.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")
            # Allow space around '=' like KEY = value
            if key and (key not in os.environ or not os.environ[key]):
                os.environ[key] = val


def load_settings(*, env_path: Optional[str] = None, **overrides: Any) -> SitemapSettings:
    """Build settings from .env, the process environment and keyword overrides (highest wins).

    Raises pydantic.ValidationError (a ValueError) when a value is missing or invalid.
    """
    _load_env_from_file(env_path)
    values: Dict[str, Any] = {}
    for env_key, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_key)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return SitemapSettings(**values)
