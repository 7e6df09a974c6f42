"""Tests for settings normalization and startup validation."""

import pytest

from mowsy.core.config import Settings, sync_database_url
from mowsy.core.env_validation import validate_environment


def make_settings(**overrides):
    values = {"database_url": "sqlite+aiosqlite://", "jwt_secret": "x" * 32}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgres://u:p@db/mowsy", "postgresql+asyncpg://u:p@db/mowsy"),
            ("postgresql://u:p@db/mowsy", "postgresql+asyncpg://u:p@db/mowsy"),
            ("postgresql+asyncpg://u:p@db/mowsy", "postgresql+asyncpg://u:p@db/mowsy"),
            ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
        ],
    )
    def test_database_url_uses_async_driver(self, url, expected):
        assert make_settings(database_url=url).database_url == expected

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("postgres://u:p@db/mowsy", "postgresql://u:p@db/mowsy"),
            ("postgresql+asyncpg://u:p@db/mowsy", "postgresql://u:p@db/mowsy"),
            ("postgresql://u:p@db/mowsy", "postgresql://u:p@db/mowsy"),
        ],
    )
    def test_migration_url_uses_sync_driver(self, url, expected):
        assert sync_database_url(url) == expected

    def test_cors_origins(self):
        settings = make_settings(allowed_origins="https://a.example.com, https://b.example.com,")
        assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]

    def test_short_jwt_secret_rejected(self):
        with pytest.raises(ValueError):
            make_settings(jwt_secret="short")

    def test_upload_limit(self):
        assert make_settings().max_upload_size_bytes == 10 * 1024 * 1024


class TestValidateEnvironment:
    def test_debug_sqlite_passes(self):
        settings = validate_environment()
        assert settings.debug is True

    def test_wildcard_cors_outside_debug_exits(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/mowsy")
        monkeypatch.setenv("ALLOWED_ORIGINS", "*")
        with pytest.raises(SystemExit):
            validate_environment()

    def test_sqlite_outside_debug_exits(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "false")
        with pytest.raises(SystemExit):
            validate_environment()

    def test_half_configured_s3_exits(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIAEXAMPLE")
        monkeypatch.delenv("AWS_SECRET_ACCESS_KEY", raising=False)
        with pytest.raises(SystemExit):
            validate_environment()

    def test_missing_jwt_secret_exits(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "")
        with pytest.raises(SystemExit):
            validate_environment()
