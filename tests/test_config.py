"""
Unit tests for configuration management.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from railsync.config.settings import ConfigManager, Settings
from railsync.error_handling.exceptions import ConfigurationError


def make_settings(**overrides):
    values = {
        "testrail_enabled": True,
        "testrail_url": "https://acme.testrail.io",
        "testrail_username": "qa@acme.test",
        "testrail_api_key": "s3cr3t-api-key",
        "testrail_project_id": 7,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Tests for Settings model."""

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.testrail_enabled is False
        assert settings.testrail_url == ""
        assert settings.testrail_project_id == 0
        assert settings.testrail_timeout_seconds == 30.0
        assert settings.features_dir == Path("src/test/resources/features")
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.log_file is None

    def test_settings_from_env(self):
        """Test loading settings from environment variables."""
        with patch.dict(os.environ, {
            "TESTRAIL_ENABLED": "true",
            "TESTRAIL_URL": "https://acme.testrail.io/",
            "TESTRAIL_USERNAME": "qa@acme.test",
            "TESTRAIL_API_KEY": "key-123",
            "TESTRAIL_PROJECT_ID": "12",
            "FEATURES_DIR": "features/api",
        }):
            settings = Settings(_env_file=None)

        assert settings.testrail_enabled is True
        assert settings.testrail_url == "https://acme.testrail.io"
        assert settings.testrail_api_key == "key-123"
        assert settings.testrail_project_id == 12
        assert settings.features_dir == Path("features/api")

    def test_log_level_validation(self):
        """Test log level validation."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError, match="Invalid log level"):
            Settings(_env_file=None, log_level="INVALID")

    def test_log_format_validation(self):
        """Test log format validation."""
        assert Settings(_env_file=None, log_format="json").log_format == "json"

        with pytest.raises(ValueError, match="Invalid log format"):
            Settings(_env_file=None, log_format="xml")


class TestValidateIntegration:
    """Tests for integration validation."""

    def test_valid_settings(self):
        make_settings().validate_integration()

    def test_disabled_skips_validation(self):
        make_settings(testrail_enabled=False, testrail_url="").validate_integration()

    @pytest.mark.parametrize(
        "overrides, message, setting",
        [
            ({"testrail_url": ""}, "TestRail URL is not configured", "testrail_url"),
            ({"testrail_url": "acme.testrail.io"}, "must start with http", "testrail_url"),
            ({"testrail_username": ""}, "username is not configured", "testrail_username"),
            ({"testrail_api_key": ""}, "API key is not configured", "testrail_api_key"),
            ({"testrail_project_id": 0}, "project ID is not configured", "testrail_project_id"),
        ],
    )
    def test_missing_setting(self, overrides, message, setting):
        with pytest.raises(ConfigurationError, match=message) as exc_info:
            make_settings(**overrides).validate_integration()
        assert exc_info.value.setting == setting

    @pytest.mark.parametrize("url", ["https://a\x00b.io", "https://"])
    def test_unparseable_url(self, url):
        with pytest.raises(ConfigurationError, match="TestRail URL (is invalid|has no host)") as exc_info:
            make_settings(testrail_url=url).validate_integration()
        assert exc_info.value.setting == "testrail_url"

    def test_first_problem_is_reported(self):
        with pytest.raises(ConfigurationError, match="URL"):
            make_settings(testrail_url="", testrail_api_key="").validate_integration()


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_get(self):
        manager = ConfigManager(make_settings())
        assert manager.get("testrail_project_id") == 7
        assert manager.get("missing", "fallback") == "fallback"

    def test_get_required(self):
        manager = ConfigManager(make_settings())
        assert manager.get_required("testrail_url") == "https://acme.testrail.io"
        with pytest.raises(KeyError, match="missing"):
            manager.get_required("missing")

    def test_get_all_masks_api_key(self):
        values = ConfigManager(make_settings()).get_all()
        assert values["testrail_api_key"] == "***"
        assert values["testrail_username"] == "qa@acme.test"
