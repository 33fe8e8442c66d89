import os
import tempfile

import pytest

from sitemapper.config import SitemapSettings
from sitemapper.models.sitemap import ChangeFrequency
from sitemapper.services.context import create_context
from sitemapper.services.import_service import import_entries_from_csv


def _ctx(**kw):
    kw.setdefault("base_url", "https://example.com")
    return create_context(SitemapSettings(**kw))


def test_import_entries_from_csv_counts_and_values():
    with tempfile.TemporaryDirectory() as tmp:
        with open(os.path.join(tmp, "entries.csv"), "w", encoding="utf-8") as f:
            f.write(
                "path,priority,changefreq,lastmod,locales\n"
                "/,1.0,daily,2025-01-15,\n"
                "/about,,weekly,not-a-date,\n"
                ",0.3,,,\n"
                "/about,,,,\n"
                "/guide,0.6,,2025-02-01T08:00:00,en|pt\n"
            )
        ctx = _ctx()
        summary = import_entries_from_csv("entries.csv", project_root=tmp, context=ctx)

    assert summary["entries"]["rows_processed"] == 5
    assert summary["entries"]["skipped"] == 1
    assert summary["entries"]["unique_imported"] == 4

    reg = ctx.registry
    home = reg.get("https://example.com/")
    assert home.priority == 1.0
    assert home.changefreq is ChangeFrequency.DAILY
    assert home.lastmod.isoformat() == "2025-01-15T00:00:00"

    about = reg.get("https://example.com/about")
    assert about.lastmod is None
    assert about.priority == 0.5

    guide_pt = reg.get("https://example.com/pt/guide")
    assert guide_pt is not None
    assert list(guide_pt.alternates) == ["en", "pt", "x-default"]
    assert reg.size() == 4


def test_import_missing_file():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(FileNotFoundError):
            import_entries_from_csv("nope.csv", project_root=tmp, context=_ctx())


def test_import_missing_path_column():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "bad.csv")
        with open(path, "w", encoding="utf-8") as f:
            f.write("url,priority\n/a,0.5\n")
        with pytest.raises(ValueError, match="path"):
            import_entries_from_csv(path, project_root=tmp, context=_ctx())


@pytest.mark.parametrize("row", ["/a,1.5,,,", "/a,high,,,", "/a,,sometimes,,"])
def test_import_invalid_rows(row):
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "bad.csv")
        with open(path, "w", encoding="utf-8") as f:
            f.write("path,priority,changefreq,lastmod,locales\n" + row + "\n")
        ctx = _ctx()
        with pytest.raises(ValueError, match="ine 2"):
            import_entries_from_csv(path, project_root=tmp, context=ctx)
        assert ctx.registry.size() == 0


def test_import_tolerates_padded_headers():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "padded.csv")
        with open(path, "w", encoding="utf-8") as f:
            f.write(" path , priority \n/a,0.3\n/b,\n")
        ctx = _ctx()
        summary = import_entries_from_csv(path, project_root=tmp, context=ctx)
    assert summary["entries"]["unique_imported"] == 2
    assert summary["entries"]["skipped"] == 0
    assert ctx.registry.get("https://example.com/a").priority == 0.3
