import csv
import logging
import os
from typing import Dict, List, Optional, Set

from sitemapper.models.sitemap import ChangeFrequency, SitemapUrl
from sitemapper.services.context import SitemapContext
from sitemapper.services.producer import RouteMetadata, build_entries

logger = logging.getLogger(__name__)

RequiredEntryHeaders = {"path"}
LOCALE_SEPARATOR = "|"


def _resolve_path(path: str, project_root: str) -> str:
    """Resolve a possibly relative path against the project root.

    If path is absolute, return it unchanged. Otherwise, join to project_root.
    """
    if os.path.isabs(path):
        return path
    return os.path.join(project_root, path)


def _parse_priority(raw: str, line_no: int) -> Optional[float]:
    if raw == "":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid priority on line {line_no}: {raw}") from exc
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Priority out of range (0.0-1.0) on line {line_no}: {raw}")
    return value


def import_entries_from_csv(
    csv_path: str,
    *,
    project_root: str,
    context: SitemapContext,
) -> Dict:
    """Import sitemap entries from a CSV file into the context's registry.

    Contract:
    - Inputs: CSV with a ``path`` column and optional ``priority``, ``changefreq``,
      ``lastmod`` and ``locales`` (``|`` separated) columns
    - Outputs: summary dict with counts
    - Errors: FileNotFoundError for a missing file; ValueError for malformed headers/rows.
      An unparseable lastmod is not an error: the entry is imported without it.
    """
    pr = os.path.abspath(project_root)
    path = _resolve_path(csv_path, pr)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Entries CSV not found: {path}")

    rows_processed = 0
    skipped = 0
    seen: Set[str] = set()
    batch: List[SitemapUrl] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        reader.fieldnames = [(h or "").strip() for h in (reader.fieldnames or [])]
        headers = set(reader.fieldnames)
        if not RequiredEntryHeaders.issubset(headers):
            missing = RequiredEntryHeaders - headers
            raise ValueError(f"Entries CSV missing required columns: {', '.join(sorted(missing))}")
        # line 1 is the header
        for line_no, row in enumerate(reader, start=2):
            rows_processed += 1
            route_path = (row.get("path") or "").strip()
            if not route_path:
                skipped += 1
                continue
            locales = tuple(
                s.strip() for s in (row.get("locales") or "").split(LOCALE_SEPARATOR) if s.strip()
            )
            try:
                changefreq = ChangeFrequency.parse(row.get("changefreq"))
            except ValueError as exc:
                raise ValueError(f"Line {line_no}: {exc}") from exc
            meta = RouteMetadata(
                priority=_parse_priority((row.get("priority") or "").strip(), line_no),
                changefreq=changefreq,
                lastmod=(row.get("lastmod") or "").strip() or None,
                locales=locales,
            )
            for entry in build_entries(route_path, meta, context.builder, context.settings):
                if entry.loc in seen:
                    continue
                seen.add(entry.loc)
                batch.append(entry)

    context.registry.add_all(batch)
    logger.info("Imported %d sitemap URLs from %s", len(batch), path)
    return {
        "entries": {
            "rows_processed": rows_processed,
            "unique_imported": len(batch),
            "skipped": skipped,
        }
    }
