from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from sitemapper.config import load_settings
from sitemapper.services.context import SitemapContext, create_context
from sitemapper.services.import_service import import_entries_from_csv
from sitemapper.services.serializer import shard_filename


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _write(path: str, text: str) -> str:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


def write_sitemap_files(ctx: SitemapContext, out_dir: str) -> List[str]:
    """Write sitemap.xml, plus one file per shard when sharding is required.

    Returns the written paths, sitemap.xml first.
    """
    ensure_dir(out_dir)
    registry = ctx.registry
    if not registry.requires_sharding():
        return [_write(os.path.join(out_dir, "sitemap.xml"), registry.document())]

    paths = [_write(os.path.join(out_dir, "sitemap.xml"), registry.index_document())]
    for n in range(1, registry.shard_count() + 1):
        paths.append(_write(os.path.join(out_dir, shard_filename(n)), registry.page_document(n)))
    return paths


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Render sitemap files from a CSV of paths")
    sub = parser.add_subparsers(dest="cmd", required=True)

    render = sub.add_parser("render", help="Import a CSV of paths and write sitemap XML files")
    render.add_argument("--csv", required=True, help="CSV with a 'path' column (optional: priority, changefreq, lastmod, locales)")
    render.add_argument("--base-url", default=None, help="Site base URL (default: SITEMAP_BASE_URL)")
    render.add_argument("--max-per-shard", type=int, default=None, help="Entries per sitemap file")
    render.add_argument("--locales", default=None, help="Comma separated locale codes")
    render.add_argument("--out-dir", default=os.path.join(os.getcwd(), "public"), help="Output directory")
    render.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "render":
        try:
            settings = load_settings(
                base_url=args.base_url,
                max_entries_per_shard=args.max_per_shard,
                locales=args.locales,
            )
            ctx = create_context(settings)
            import_entries_from_csv(args.csv, project_root=os.getcwd(), context=ctx)
        except (FileNotFoundError, ValueError) as exc:
            parser.error(str(exc))
        for path in write_sitemap_files(ctx, args.out_dir):
            print(path)
        ctx.close()
        return 0

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
