"""In-memory sitemap registry.

Holds every URL that should appear in the sitemap, keyed by ``loc``, and caches
the rendered sitemap and sitemap index documents.

Thread safety:
- The entry dict is only touched while holding ``_entries_lock`` (short
  critical sections: insert, remove, snapshot).
- Each cached document is an immutable ``(generation, text)`` tuple read
  without locking. Every mutation bumps ``_generation`` and drops both caches
  before releasing the entry lock, so a reader that starts after a mutation
  returns can never be handed a document rendered before it.
- On a cache miss a per-document lock lets one thread render while the others
  wait and then share the result.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sitemapper.models.sitemap import SitemapUrl
from sitemapper.services import serializer

logger = logging.getLogger(__name__)

_Cache = Optional[Tuple[int, str]]


class SitemapRegistry:
    def __init__(self, *, base_url: str, max_entries_per_shard: int = 50_000) -> None:
        if max_entries_per_shard < 1:
            raise ValueError(f"max_entries_per_shard must be >= 1, got: {max_entries_per_shard}")
        self.base_url = base_url
        self.max_entries_per_shard = int(max_entries_per_shard)

        self._entries: Dict[str, SitemapUrl] = {}
        self._entries_lock = threading.Lock()
        self._generation = 0

        self._document_cache: _Cache = None
        self._index_cache: _Cache = None
        self._document_lock = threading.Lock()
        self._index_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "SitemapRegistry":
        return cls(base_url=settings.base_url, max_entries_per_shard=settings.max_entries_per_shard)

    # --- mutations ---

    def _invalidate(self) -> None:
        # caller holds _entries_lock
        self._generation += 1
        self._document_cache = None
        self._index_cache = None

    def add(self, entry: SitemapUrl) -> None:
        with self._entries_lock:
            self._entries[entry.loc] = entry
            self._invalidate()
        logger.debug("Added sitemap URL: %s", entry.loc)

    def add_all(self, entries: Iterable[SitemapUrl]) -> int:
        """Insert or replace many entries; caches are invalidated once for the batch."""
        batch = list(entries)
        with self._entries_lock:
            for entry in batch:
                self._entries[entry.loc] = entry
            self._invalidate()
        logger.debug("Added %d sitemap URLs", len(batch))
        return len(batch)

    def remove(self, loc: str) -> bool:
        with self._entries_lock:
            removed = self._entries.pop(loc, None) is not None
            if removed:
                self._invalidate()
        if removed:
            logger.debug("Removed sitemap URL: %s", loc)
        return removed

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()
            self._invalidate()
        logger.debug("Cleared all sitemap URLs")

    # --- reads ---

    def contains(self, loc: str) -> bool:
        return loc in self._entries

    __contains__ = contains

    def size(self) -> int:
        return len(self._entries)

    __len__ = size

    def get(self, loc: str) -> Optional[SitemapUrl]:
        return self._entries.get(loc)

    def _snapshot_with_generation(self) -> Tuple[Tuple[SitemapUrl, ...], int]:
        with self._entries_lock:
            return tuple(self._entries.values()), self._generation

    def snapshot(self) -> Tuple[SitemapUrl, ...]:
        """All entries in insertion order, as a tuple detached from the registry."""
        return self._snapshot_with_generation()[0]

    def page(self, page_number: int, page_size: int) -> List[SitemapUrl]:
        """1-indexed slice of the entries; empty when the page is out of range."""
        if page_number < 1 or page_size < 1:
            return []
        entries = self.snapshot()
        start = (page_number - 1) * page_size
        if start >= len(entries):
            return []
        return list(entries[start:start + page_size])

    def _shards_for(self, total: int) -> int:
        return (total + self.max_entries_per_shard - 1) // self.max_entries_per_shard

    def shard_count(self) -> int:
        """0 when empty, else ceil(size / max_entries_per_shard)."""
        return self._shards_for(self.size())

    def requires_sharding(self) -> bool:
        return self.size() > self.max_entries_per_shard

    # --- documents ---

    def _cached(
        self,
        attr: str,
        lock: threading.Lock,
        render: Callable[[Tuple[SitemapUrl, ...]], str],
        label: str,
    ) -> str:
        cached: _Cache = getattr(self, attr)
        if cached is not None and cached[0] == self._generation:
            return cached[1]
        with lock:
            cached = getattr(self, attr)
            if cached is not None and cached[0] == self._generation:
                return cached[1]
            entries, generation = self._snapshot_with_generation()
            text = render(entries)
            with self._entries_lock:
                # a mutation during rendering makes this result stale; don't publish it
                if generation == self._generation:
                    setattr(self, attr, (generation, text))
            logger.debug("Regenerated %s (%d entries, generation %d)", label, len(entries), generation)
            return text

    def document(self) -> str:
        """Full sitemap over all entries; cached until the next mutation."""
        return self._cached("_document_cache", self._document_lock, serializer.render_document, "sitemap")

    def index_document(self) -> str:
        """Sitemap index over ``shard_count()`` shards; cached until the next mutation."""
        return self._cached(
            "_index_cache",
            self._index_lock,
            lambda entries: serializer.render_index(self._shards_for(len(entries)), self.base_url),
            "sitemap index",
        )

    def page_document(self, page_number: int) -> str:
        # not cached: keeps memory bounded for large, sharded sitemaps
        return serializer.render_document(self.page(page_number, self.max_entries_per_shard))
