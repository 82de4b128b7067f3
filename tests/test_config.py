from __future__ import annotations


def _reset_settings(monkeypatch, **env):
    from listing_aggregator.config import reset_settings_cache

    for k, v in env.items():
        if v is None:
            monkeypatch.delenv(k, raising=False)
        else:
            monkeypatch.setenv(k, str(v))
    reset_settings_cache()


def test_defaults(monkeypatch):
    from listing_aggregator.config import get_settings

    _reset_settings(
        monkeypatch,
        LISTINGS_DATA_DIR=None,
        LISTINGS_BASE_URL=None,
        LISTINGS_SOURCE_TIMEOUT=None,
        LISTINGS_PAGE_SIZE=None,
        LISTINGS_MAX_BYTES=None,
    )
    settings = get_settings()
    assert settings.data_dir == "./data"
    assert settings.base_url is None
    assert settings.source_timeout == 10.0
    assert settings.page_size == 20
    assert settings.max_bytes == 50_000_000


def test_env_overrides_and_bad_values(monkeypatch):
    from listing_aggregator.config import get_settings

    _reset_settings(
        monkeypatch,
        LISTINGS_DATA_DIR="/srv/listings",
        LISTINGS_BASE_URL="https://data.example.com",
        LISTINGS_SOURCE_TIMEOUT="2.5",
        LISTINGS_PAGE_SIZE="zero",
        LISTINGS_MAX_BYTES="-4",
    )
    settings = get_settings()
    assert settings.data_dir == "/srv/listings"
    assert settings.base_url == "https://data.example.com"
    assert settings.source_timeout == 2.5
    assert settings.page_size == 20
    assert settings.max_bytes == 50_000_000
    _reset_settings(monkeypatch, LISTINGS_DATA_DIR=None, LISTINGS_BASE_URL=None,
                    LISTINGS_SOURCE_TIMEOUT=None, LISTINGS_PAGE_SIZE=None, LISTINGS_MAX_BYTES=None)


def test_service_picks_provider_from_settings(settings):
    from dataclasses import replace

    from listing_aggregator.pipeline import SearchService
    from listing_aggregator.sources import FileSourceProvider, HttpSourceProvider

    assert isinstance(SearchService(settings=settings).provider, FileSourceProvider)
    remote = SearchService(settings=replace(settings, base_url="https://data.example.com"))
    assert isinstance(remote.provider, HttpSourceProvider)
    assert remote.provider.timeout == settings.source_timeout
