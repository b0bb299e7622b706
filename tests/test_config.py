"""Tests for configuration settings."""

from datetime import timedelta

import pytest

from github_activity_tracker.config import FetchConfig, Settings, SyncConfig, get_settings


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self):
        """Test default values are correct."""
        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./github_activity.db"
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.repos_file == "config.properties"
        assert settings.api_port == 3000
        assert settings.sync_interval_minutes is None

    def test_settings_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
        monkeypatch.setenv("GITHUB_TOKEN", "test_token_123")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("REPOS_FILE", "/etc/tracker/repos.properties")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./test.db"
        assert settings.github_token == "test_token_123"
        assert settings.environment == "production"
        assert settings.log_level == "DEBUG"
        assert settings.repos_file == "/etc/tracker/repos.properties"

    def test_nested_settings_from_env(self, monkeypatch):
        """Nested configs are set with a double-underscore delimiter."""
        monkeypatch.setenv("SYNC__RETENTION_DAYS", "14")
        monkeypatch.setenv("FETCH__MAX_RETRIES", "2")
        monkeypatch.setenv("RATE_LIMIT__LOW_WATER_MARK", "50")

        settings = Settings(_env_file=None)

        assert settings.sync.retention_days == 14
        assert settings.fetch.max_retries == 2
        assert settings.rate_limit.low_water_mark == 50

    def test_settings_environment_validation(self, monkeypatch):
        """Test that invalid environment value is rejected."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestNestedConfigs:
    """Defaults of the pipeline tuning knobs."""

    def test_fetch_defaults(self):
        config = FetchConfig()
        assert config.page_size == 100
        assert config.max_retries == 5
        assert config.initial_backoff_seconds == 5.0

    def test_page_size_capped_at_github_maximum(self):
        with pytest.raises(ValueError):
            FetchConfig(page_size=101)

    def test_sync_defaults(self):
        config = SyncConfig()
        assert config.retention == timedelta(days=30)
        assert config.review_batch_size == 5
        assert config.insert_batch_size == 20
        assert config.update_pull_request_state is True

    def test_rate_limit_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.rate_limit.low_water_mark == 20
        assert settings.rate_limit.safety_margin_seconds == 5
