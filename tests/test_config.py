"""
Configuration tests.
"""

import pytest

from nomoji.config import (
    DeploymentEnvironment,
    Settings,
    get_settings,
    resolve_environment_profile,
)


def test_get_settings_returns_settings() -> None:
    """get_settings returns a Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_has_required_attributes() -> None:
    """Settings has all required attributes."""
    settings = get_settings()
    assert settings.app_name == "nomoji"
    assert settings.is_sqlite
    assert settings.shared_config_ttl_days == 30
    assert settings.max_request_bytes == 100 * 1024
    assert settings.rate_limit_enabled is False


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Retention, size limit and base URL load from env."""
    monkeypatch.setenv("SHARED_CONFIG_TTL_DAYS", "7")
    monkeypatch.setenv("MAX_REQUEST_BYTES", "2048")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://example.test/")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.shared_config_ttl_days == 7
        assert settings.max_request_bytes == 2048
        assert settings.public_base_url == "https://example.test"
        assert settings.log_level == "DEBUG"
    finally:
        get_settings.cache_clear()


def test_generic_postgres_url_gets_psycopg_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/nomoji")
    settings = Settings()
    assert settings.database_url == "postgresql+psycopg://u:p@db:5432/nomoji"
    assert not settings.is_sqlite


# ── Deployment environment ──────────────────────────────────────────


class TestDeploymentEnvironment:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("development", DeploymentEnvironment.DEVELOPMENT),
            (" Staging ", DeploymentEnvironment.STAGING),
            ("production", DeploymentEnvironment.PRODUCTION),
            ("qa", DeploymentEnvironment.PRODUCTION),
            ("", DeploymentEnvironment.PRODUCTION),
            (None, DeploymentEnvironment.PRODUCTION),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        """Unknown or missing values resolve to production."""
        assert DeploymentEnvironment.parse(raw) is expected

    def test_production_profile(self) -> None:
        profile = resolve_environment_profile(DeploymentEnvironment.PRODUCTION)
        assert profile.strict_transport_security
        assert not profile.expose_error_details
        assert not profile.rate_limit_bypass
        assert not profile.cors_allow_any_origin
        assert "https://nomoji.dev" in profile.cors_origins

    def test_development_profile(self) -> None:
        profile = resolve_environment_profile(DeploymentEnvironment.DEVELOPMENT)
        assert profile.cors_allow_any_origin
        assert profile.rate_limit_bypass
        assert profile.expose_error_details
        assert not profile.strict_transport_security

    def test_settings_profile_follows_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        settings = Settings()
        assert settings.profile.environment is DeploymentEnvironment.DEVELOPMENT

    def test_profile_is_immutable(self) -> None:
        profile = resolve_environment_profile(DeploymentEnvironment.STAGING)
        with pytest.raises(AttributeError):
            profile.rate_limit_bypass = True
