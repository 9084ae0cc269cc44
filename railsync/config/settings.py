"""Configuration management for railsync."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from railsync.core.interfaces import ConfigProvider
from railsync.error_handling.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # TestRail Configuration
    testrail_enabled: bool = Field(
        default=False, description="Enable TestRail synchronization and reporting"
    )
    testrail_url: str = Field(
        default="", description="TestRail instance URL, e.g. https://acme.testrail.io"
    )
    testrail_username: str = Field(
        default="", description="TestRail user (email)"
    )
    testrail_api_key: str = Field(
        default="", description="TestRail API key"
    )
    testrail_project_id: int = Field(
        default=0, ge=0, description="Numeric TestRail project id"
    )
    testrail_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout for a single TestRail call"
    )

    # Corpus Configuration
    features_dir: Path = Field(
        default=Path("src/test/resources/features"),
        description="Root directory of the .feature corpus",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: str = Field(
        default="text",
        description="Log format (json or text)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path"
    )

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ["json", "text"]:
            raise ValueError(f"Invalid log format: {v}")
        return v

    @field_validator("testrail_url")
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def validate_integration(self) -> None:
        """
        Check that everything needed for remote calls is present.

        Does nothing when the integration is disabled.

        Raises:
            ConfigurationError: naming the first missing or invalid setting
        """
        if not self.testrail_enabled:
            return

        if not self.testrail_url:
            raise ConfigurationError(
                "TestRail URL is not configured", setting="testrail_url"
            )
        if not self.testrail_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"TestRail URL must start with http:// or https://: {self.testrail_url}",
                setting="testrail_url",
            )
        try:
            host = httpx.URL(self.testrail_url).host
        except httpx.InvalidURL as e:
            raise ConfigurationError(
                f"TestRail URL is invalid: {e}", setting="testrail_url", cause=e
            ) from e
        if not host:
            raise ConfigurationError(
                f"TestRail URL has no host: {self.testrail_url}", setting="testrail_url"
            )
        if not self.testrail_username:
            raise ConfigurationError(
                "TestRail username is not configured", setting="testrail_username"
            )
        if not self.testrail_api_key:
            raise ConfigurationError(
                "TestRail API key is not configured", setting="testrail_api_key"
            )
        if self.testrail_project_id <= 0:
            raise ConfigurationError(
                "TestRail project ID is not configured", setting="testrail_project_id"
            )


class ConfigManager(ConfigProvider):
    """Configuration manager implementation."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """
        Initialize config manager.

        Args:
            settings: Optional settings instance
        """
        self.settings = settings or get_settings()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        try:
            return getattr(self.settings, key)
        except AttributeError:
            return default

    def get_required(self, key: str) -> Any:
        """Get required configuration value."""
        try:
            return getattr(self.settings, key)
        except AttributeError:
            raise KeyError(f"Required configuration key not found: {key}")

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values, with the API key masked."""
        values = self.settings.model_dump()
        if values.get("testrail_api_key"):
            values["testrail_api_key"] = "***"
        return values


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    # Load .env file if it exists
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    return Settings()


def get_config() -> ConfigManager:
    """Get configuration manager instance."""
    return ConfigManager(get_settings())
