from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class ChangeFrequency(str, Enum):
    """How often a page is expected to change (sitemaps.org ``<changefreq>``)."""

    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ChangeFrequency"]:
        """Parse a case-insensitive name; blank means not set."""
        if value is None:
            return None
        if isinstance(value, ChangeFrequency):
            return value
        s = str(value).strip().lower()
        if not s:
            return None
        try:
            return cls(s)
        except ValueError as exc:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid changefreq '{value}'. Expected one of: {allowed}") from exc


@dataclass(frozen=True)
class SitemapUrl:
    """A single URL registered in the sitemap.

    All validation happens here, once. Instances are immutable and the
    ``alternates`` mapping is copied into a read-only view so callers can't
    change an entry after it has been handed to the registry.
    """

    loc: str
    lastmod: Optional[datetime] = None
    changefreq: Optional[ChangeFrequency] = None
    priority: Optional[float] = None
    alternates: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.loc is None:
            raise ValueError("loc must not be None")
        if not isinstance(self.loc, str) or not self.loc.strip():
            raise ValueError("loc must not be blank")
        if not (self.loc.startswith("http://") or self.loc.startswith("https://")):
            raise ValueError(f"loc must start with http:// or https://, got: {self.loc}")
        if self.priority is not None:
            priority = float(self.priority)
            if math.isnan(priority) or priority < 0.0 or priority > 1.0:
                raise ValueError(f"priority must be between 0.0 and 1.0, got: {self.priority}")
            object.__setattr__(self, "priority", priority)
        if self.changefreq is not None and not isinstance(self.changefreq, ChangeFrequency):
            object.__setattr__(self, "changefreq", ChangeFrequency.parse(self.changefreq))
        object.__setattr__(self, "alternates", MappingProxyType(dict(self.alternates or {})))

    def to_dict(self) -> dict:
        return {
            "loc": self.loc,
            "lastmod": self.lastmod.isoformat() if self.lastmod else None,
            "changefreq": self.changefreq.value if self.changefreq else None,
            "priority": self.priority,
            "alternates": dict(self.alternates),
        }
