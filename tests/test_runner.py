import os
import tempfile

import pytest

from sitemapper.runner import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for k in list(os.environ):
        if k.startswith("SITEMAP_"):
            monkeypatch.delenv(k, raising=False)


def _write_csv(tmp, n):
    path = os.path.join(tmp, "paths.csv")
    with open(path, "w", encoding="utf-8") as f:
        f.write("path\n")
        for i in range(n):
            f.write(f"/p{i}\n")
    return path


def test_render_single_sitemap(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        csv_path = _write_csv(tmp, 3)
        out_dir = os.path.join(tmp, "out")
        rc = main(["render", "--csv", csv_path, "--base-url", "https://example.com", "--out-dir", out_dir])
        assert rc == 0
        assert os.listdir(out_dir) == ["sitemap.xml"]
        with open(os.path.join(out_dir, "sitemap.xml"), encoding="utf-8") as f:
            xml = f.read()
        assert xml.count("<url>") == 3
        assert capsys.readouterr().out.strip().endswith("sitemap.xml")


def test_render_sharded_sitemaps():
    with tempfile.TemporaryDirectory() as tmp:
        csv_path = _write_csv(tmp, 5)
        out_dir = os.path.join(tmp, "out")
        rc = main([
            "render", "--csv", csv_path, "--base-url", "https://example.com",
            "--max-per-shard", "2", "--out-dir", out_dir,
        ])
        assert rc == 0
        assert sorted(os.listdir(out_dir)) == ["sitemap-1.xml", "sitemap-2.xml", "sitemap-3.xml", "sitemap.xml"]
        with open(os.path.join(out_dir, "sitemap.xml"), encoding="utf-8") as f:
            index = f.read()
        assert "<sitemapindex" in index
        assert "https://example.com/sitemap-3.xml" in index
        with open(os.path.join(out_dir, "sitemap-3.xml"), encoding="utf-8") as f:
            assert f.read().count("<url>") == 1


def test_render_missing_csv_errors():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(SystemExit) as exc:
            main(["render", "--csv", os.path.join(tmp, "nope.csv"), "--base-url", "https://example.com"])
        assert exc.value.code == 2
