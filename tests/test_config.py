import os
import tempfile

import pytest

from sitemapper.config import InitializationType, LocaleUrlPattern, SitemapSettings, load_settings
from sitemapper.models.sitemap import ChangeFrequency


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for k in list(os.environ):
        if k.startswith("SITEMAP_"):
            monkeypatch.delenv(k, raising=False)


def test_defaults():
    s = SitemapSettings(base_url="https://example.com")
    assert s.max_entries_per_shard == 50000
    assert s.default_priority == 0.5
    assert s.default_changefreq is None
    assert s.locales == ()
    assert s.locale_url_pattern is LocaleUrlPattern.PATH_PREFIX
    assert s.locale_query_param_name == "lang"
    assert s.default_locale is None
    assert s.omit_default_locale_in_url is False
    assert s.initialization is InitializationType.EAGER


@pytest.mark.parametrize("base_url", ["", "example.com", "/relative"])
def test_base_url_must_be_absolute(base_url):
    with pytest.raises(ValueError):
        SitemapSettings(base_url=base_url)


def test_shard_size_bounds():
    with pytest.raises(ValueError):
        SitemapSettings(base_url="https://example.com", max_entries_per_shard=0)
    with pytest.raises(ValueError):
        SitemapSettings(base_url="https://example.com", max_entries_per_shard=50001)


def test_load_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SITEMAP_BASE_URL", "https://env.example.com")
    monkeypatch.setenv("SITEMAP_LOCALES", "en, pt ,es")
    monkeypatch.setenv("SITEMAP_LOCALE_URL_PATTERN", "QUERY_PARAM")
    monkeypatch.setenv("SITEMAP_DEFAULT_CHANGEFREQ", "Monthly")
    monkeypatch.setenv("SITEMAP_OMIT_DEFAULT_LOCALE_IN_URL", "true")
    monkeypatch.setenv("SITEMAP_MAX_ENTRIES_PER_SHARD", "100")
    s = load_settings(env_path=str(tmp_path / "missing.env"))
    assert s.base_url == "https://env.example.com"
    assert s.locales == ("en", "pt", "es")
    assert s.locale_url_pattern is LocaleUrlPattern.QUERY_PARAM
    assert s.default_changefreq is ChangeFrequency.MONTHLY
    assert s.omit_default_locale_in_url is True
    assert s.max_entries_per_shard == 100


def test_overrides_win_over_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SITEMAP_BASE_URL", "https://env.example.com")
    s = load_settings(env_path=str(tmp_path / "missing.env"), base_url="https://override.example.com")
    assert s.base_url == "https://override.example.com"


def test_load_settings_reads_env_file(monkeypatch):
    # empty values are filled from .env and removed again on teardown
    monkeypatch.setenv("SITEMAP_BASE_URL", "")
    monkeypatch.setenv("SITEMAP_DEFAULT_LOCALE", "")
    with tempfile.TemporaryDirectory() as tmp:
        env_path = os.path.join(tmp, ".env")
        with open(env_path, "w", encoding="utf-8") as f:
            f.write("# comment\nSITEMAP_BASE_URL = 'https://file.example.com'\nSITEMAP_DEFAULT_LOCALE=en\n")
        s = load_settings(env_path=env_path)
    assert s.base_url == "https://file.example.com"
    assert s.default_locale == "en"


def test_missing_base_url(tmp_path):
    with pytest.raises(ValueError):
        load_settings(env_path=str(tmp_path / "missing.env"))
