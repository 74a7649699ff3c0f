"""
Tests for loading MiddlewareClientConfig from the environment.
"""

import os

import pytest

from http_middleware.core.env_config import (
    LoggingSettings,
    MiddlewareClientSettings,
    config_summary,
    load_from_env,
)
from http_middleware.core.exceptions import ConfigurationError
from http_middleware.core.logging import LogFormat, LogLevel


@pytest.fixture
def no_env_file(tmp_path):
    return str(tmp_path / "missing.env")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in list(os.environ):
        if name.startswith("HTTP_MIDDLEWARE_"):
            monkeypatch.delenv(name)


class TestLoadFromEnv:

    def test_defaults(self, no_env_file):
        config = load_from_env(env_file=no_env_file)

        assert config.base_url is None
        assert dict(config.headers) == {}
        assert config.timeout.connect == 5.0
        assert config.timeout.read == 30.0
        assert not config.follow_redirects
        assert config.logging is None

    def test_environment_variables(self, monkeypatch, no_env_file):
        monkeypatch.setenv("HTTP_MIDDLEWARE_BASE_URL", "https://api.example.com/")
        monkeypatch.setenv("HTTP_MIDDLEWARE_TIMEOUT_CONNECT", "2.5")
        monkeypatch.setenv("HTTP_MIDDLEWARE_TIMEOUT_READ", "15")
        monkeypatch.setenv("HTTP_MIDDLEWARE_FOLLOW_REDIRECTS", "true")
        monkeypatch.setenv("HTTP_MIDDLEWARE_HEADERS", '{"Accept": "application/json"}')

        config = load_from_env(env_file=no_env_file)

        assert config.base_url == "https://api.example.com"
        assert config.timeout.connect == 2.5
        assert config.timeout.read == 15.0
        assert config.follow_redirects
        assert config.headers["Accept"] == "application/json"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text(
            "HTTP_MIDDLEWARE_BASE_URL=https://staging.example.com\n"
            "HTTP_MIDDLEWARE_TIMEOUT_POOL=1\n"
        )

        config = load_from_env(env_file=str(env_file))

        assert config.base_url == "https://staging.example.com"
        assert config.timeout.pool == 1.0

    def test_environment_wins_over_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("HTTP_MIDDLEWARE_BASE_URL=https://file.example.com\n")
        monkeypatch.setenv("HTTP_MIDDLEWARE_BASE_URL", "https://env.example.com")

        assert load_from_env(env_file=str(env_file)).base_url == "https://env.example.com"

    def test_overrides_win(self, monkeypatch, no_env_file):
        monkeypatch.setenv("HTTP_MIDDLEWARE_TIMEOUT_READ", "15")

        config = load_from_env(env_file=no_env_file, timeout_read=99, base_url="http://localhost:8080")

        assert config.timeout.read == 99
        assert config.base_url == "http://localhost:8080"

    def test_unknown_override_rejected(self, no_env_file):
        with pytest.raises(ConfigurationError, match="retries"):
            load_from_env(env_file=no_env_file, retries=3)

    def test_invalid_value_rejected(self, monkeypatch, no_env_file):
        monkeypatch.setenv("HTTP_MIDDLEWARE_TIMEOUT_READ", "-1")

        with pytest.raises(ConfigurationError):
            load_from_env(env_file=no_env_file)

    def test_invalid_base_url_rejected(self, no_env_file):
        with pytest.raises(ConfigurationError):
            load_from_env(env_file=no_env_file, base_url="ftp://example.com")

    def test_logging_enabled(self, monkeypatch, no_env_file):
        monkeypatch.setenv("HTTP_MIDDLEWARE_LOG_ENABLED", "1")
        monkeypatch.setenv("HTTP_MIDDLEWARE_LOG_LEVEL", "debug")
        monkeypatch.setenv("HTTP_MIDDLEWARE_LOG_FORMAT", "JSON")

        config = load_from_env(env_file=no_env_file)

        assert config.logging is not None
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == LogFormat.JSON

    def test_logging_file_requires_path(self, monkeypatch, no_env_file):
        monkeypatch.setenv("HTTP_MIDDLEWARE_LOG_ENABLED", "true")
        monkeypatch.setenv("HTTP_MIDDLEWARE_LOG_ENABLE_FILE", "true")

        with pytest.raises(ConfigurationError, match="file_path"):
            load_from_env(env_file=no_env_file)


class TestSettingsModels:

    def test_settings_disable_logging_by_default(self, no_env_file):
        settings = MiddlewareClientSettings(_env_file=no_env_file)
        assert settings.to_logging_settings() is None

    def test_logging_settings_validation(self):
        with pytest.raises(ValueError):
            LoggingSettings(enable_file=True)


class TestConfigSummary:

    def test_masks_sensitive_headers(self, no_env_file):
        config = load_from_env(
            env_file=no_env_file,
            headers={"Authorization": "Bearer secret", "Accept": "*/*"},
        )

        summary = config_summary(config)

        assert "secret" not in summary
        assert "***REDACTED***" in summary
        assert "Accept" in summary
