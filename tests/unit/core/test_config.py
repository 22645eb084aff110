"""
Tests for application settings
"""

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Clear the settings cache before each test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("ENVIRONMENT", "DATABASE_URL", "LOG_FORMAT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)
        assert settings.environment == "development"
        assert settings.is_development
        assert not settings.is_production
        assert settings.app_name == "NeuRazor"
        assert settings.database_url == "sqlite:///./neurazor.db"
        assert settings.log_format == "json"
        assert settings.prometheus_enabled is True

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("CORS_ORIGINS", '["https://admin.example.com"]')

        settings = Settings(_env_file=None)
        assert settings.is_production
        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["https://admin.example.com"]

    @pytest.mark.parametrize(
        "field, value",
        [("environment", "qa"), ("log_format", "xml"), ("log_level", "LOUD")],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
