"""Configuration management for the character creation engine.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.

Example:
    >>> from dnd_chargen.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.creation.description_max_length
    100

Environment Variables:
    DND_CHARGEN_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    DND_CHARGEN_RULES_API_URL: Base URL of the D&D 5E SRD API
    DND_CHARGEN_RULES_TIMEOUT_SECONDS: HTTP timeout for rules lookups
    DND_CHARGEN_STORAGE_DATABASE_PATH: Path to the SQLite database file
    DND_CHARGEN_CREATION_MODIFIER_ROUNDING: "floor" or "truncate"
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_chargen.core.exceptions import ConfigurationError


class RulesSettings(BaseSettings):
    """Configuration for the rules-data provider.

    Attributes:
        source: Which provider to build by default ('static' or 'srd_api').
        api_url: Base URL of the D&D 5E SRD REST API.
        timeout_seconds: HTTP request timeout in seconds.
        max_retries: Maximum attempts per request.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_CHARGEN_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    source: Literal["static", "srd_api"] = Field(
        default="static",
        description="Rules-data provider to use",
    )
    api_url: str = Field(
        default="https://www.dnd5eapi.co/api",
        description="Base URL of the SRD API",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP request timeout",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts per request",
    )

    @field_validator("api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended with a slash."""
        return value.rstrip("/")


class StorageSettings(BaseSettings):
    """Configuration for character persistence.

    Attributes:
        backend: Repository implementation ('memory' or 'sqlite').
        database_path: Path to the SQLite database file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_CHARGEN_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Repository backend",
    )
    database_path: Path = Field(
        default=Path("data/dnd_chargen.db"),
        description="Path to SQLite database",
    )


class CreationSettings(BaseSettings):
    """Configuration for the creation flow.

    Attributes:
        description_max_length: Display limit for race option summaries.
        modifier_rounding: How odd negative ability offsets are rounded.
            "floor" follows the Player's Handbook table (score 9 gives -1);
            "truncate" rounds toward zero (score 9 gives 0).
        race_fetch_workers: Upper bound on concurrent race-detail lookups.
            Zero means one worker per race.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_CHARGEN_CREATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    description_max_length: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum length of option summaries",
    )
    modifier_rounding: Literal["floor", "truncate"] = Field(
        default="floor",
        description="Ability modifier rounding mode",
    )
    race_fetch_workers: int = Field(
        default=0,
        ge=0,
        le=64,
        description="Concurrent race lookups (0 = one per race)",
    )

    @model_validator(mode="after")
    def validate_description_length(self) -> "CreationSettings":
        """Ensure the limit leaves room for the ellipsis.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the limit is too small to truncate into.
        """
        if self.description_max_length <= 3:
            raise ConfigurationError(
                "description_max_length must be greater than 3",
                config_key="description_max_length",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        log_json: Emit JSON logs instead of console output.
        rules: Rules-data provider settings.
        storage: Persistence settings.
        creation: Creation flow settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="DND_CHARGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="D&D 5E Character Creator",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON formatted logs",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    creation: CreationSettings = Field(default_factory=CreationSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.

    Example:
        >>> settings = get_settings()
        >>> settings.creation.modifier_rounding
        'floor'
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "RulesSettings",
    "StorageSettings",
    "CreationSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
