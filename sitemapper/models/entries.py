from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class EntryCreate(BaseModel):
    """Payload for registering one URL through the management API."""
    loc: str = Field(..., description="Absolute URL (http:// or https://)")
    lastmod: Optional[datetime] = Field(None, description="Last modification time; offsets are converted to UTC")
    changefreq: Optional[str] = Field(
        default=None, description="One of always, hourly, daily, weekly, monthly, yearly, never"
    )
    priority: Optional[float] = Field(None, description="Relative priority (0.0-1.0)")
    alternates: Dict[str, str] = Field(
        default_factory=dict, description="hreflang -> URL, order preserved"
    )


class EntryOut(BaseModel):
    loc: str
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[float] = None
    alternates: Dict[str, str] = Field(default_factory=dict)


class EntryPage(BaseModel):
    page: int
    size: int
    total: int
    items: List[EntryOut]


class SitemapStats(BaseModel):
    size: int
    shard_count: int
    requires_sharding: bool
    max_entries_per_shard: int
    scanned: bool
