import pytest

from salesreport import config
from salesreport.database import async_database_url, sync_database_url


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "REFERENCE_YEAR", "SEED_SOURCE_URL", "SEED_TIMEOUT_SECONDS", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = config.load_settings()
    assert settings.database_url == "sqlite:///./sales.db"
    assert settings.reference_year == 2021
    assert settings.seed_source_url == config.DEFAULT_SEED_SOURCE_URL
    assert settings.seed_timeout == 30.0
    assert settings.cors_allow_origins == config.DEFAULT_CORS_ORIGINS
    assert settings.log_level == "INFO"


def test_reference_year_from_env(monkeypatch):
    monkeypatch.setenv("REFERENCE_YEAR", "2024")
    assert config.reference_year() == 2024


@pytest.mark.parametrize("raw", ["twenty", "0", "10000"])
def test_reference_year_invalid(monkeypatch, raw):
    monkeypatch.setenv("REFERENCE_YEAR", raw)
    with pytest.raises(ValueError):
        config.reference_year()


def test_blank_values_fall_back_to_default(monkeypatch):
    monkeypatch.setenv("SEED_SOURCE_URL", "   ")
    assert config.seed_source_url() == config.DEFAULT_SEED_SOURCE_URL


def test_cors_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com,")
    assert config.cors_allow_origins() == ["https://a.com", "https://b.com"]


def test_log_level_upper_cased(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert config.log_level() == "DEBUG"


def test_seed_timeout_invalid(monkeypatch):
    monkeypatch.setenv("SEED_TIMEOUT_SECONDS", "soon")
    with pytest.raises(ValueError):
        config.seed_timeout()


class TestDatabaseUrls:
    def test_sqlite_gets_async_driver(self):
        assert async_database_url("sqlite:///./sales.db").drivername == "sqlite+aiosqlite"

    def test_explicit_driver_untouched(self):
        assert async_database_url("sqlite+aiosqlite:///x.db").drivername == "sqlite+aiosqlite"

    def test_sync_url_drops_async_driver(self):
        url = sync_database_url("sqlite+aiosqlite:////tmp/sales.db")
        assert url.drivername == "sqlite"
        assert url.database == "/tmp/sales.db"
