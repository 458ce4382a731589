"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from dnd_chargen.core.config import (
    CreationSettings,
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_chargen.core.exceptions import ConfigurationError


class TestRulesSettings:
    """Tests for RulesSettings configuration."""

    def test_default_values(self) -> None:
        """Test default rules settings."""
        settings = RulesSettings()

        assert settings.source == "static"
        assert settings.api_url == "https://www.dnd5eapi.co/api"
        assert settings.max_retries == 3

    def test_trailing_slash_is_stripped(self) -> None:
        """Test that the API URL is normalized."""
        settings = RulesSettings(api_url="http://localhost:3000/api/")

        assert settings.api_url == "http://localhost:3000/api"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test rules settings read their own prefix."""
        monkeypatch.setenv("DND_CHARGEN_RULES_SOURCE", "srd_api")
        monkeypatch.setenv("DND_CHARGEN_RULES_TIMEOUT_SECONDS", "2.5")

        settings = RulesSettings()

        assert settings.source == "srd_api"
        assert settings.timeout_seconds == 2.5


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_values(self) -> None:
        """Test default storage settings."""
        settings = StorageSettings()

        assert settings.backend == "memory"
        assert settings.database_path == Path("data/dnd_chargen.db")

    def test_custom_path(self, tmp_path: Path) -> None:
        """Test custom database path."""
        settings = StorageSettings(backend="sqlite", database_path=tmp_path / "chars.db")

        assert settings.backend == "sqlite"
        assert settings.database_path == tmp_path / "chars.db"


class TestCreationSettings:
    """Tests for CreationSettings configuration."""

    def test_default_values(self) -> None:
        """Test default creation settings."""
        settings = CreationSettings()

        assert settings.description_max_length == 100
        assert settings.modifier_rounding == "floor"
        assert settings.race_fetch_workers == 0

    def test_description_limit_must_leave_room_for_ellipsis(self) -> None:
        """Test that a limit of three characters or fewer is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            CreationSettings(description_max_length=3)

        assert "description_max_length" in str(exc_info.value)

    def test_rounding_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test modifier rounding is read from the environment."""
        monkeypatch.setenv("DND_CHARGEN_CREATION_MODIFIER_ROUNDING", "truncate")

        assert CreationSettings().modifier_rounding == "truncate"


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings initialization."""
        settings = Settings()

        assert settings.app_name == "D&D 5E Character Creator"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.creation, CreationSettings)

    def test_env_vars(self, mock_env_vars: dict[str, str]) -> None:
        """Test settings load from DND_CHARGEN_ environment variables."""
        settings = Settings()

        assert settings.debug is True
        assert settings.log_level == "DEBUG"
        assert settings.creation.modifier_rounding == "truncate"
        assert settings.is_production is False


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_cached_instance(self) -> None:
        """Test that get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that clearing the cache picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("DND_CHARGEN_DEBUG", "true")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.debug is True

    def test_invalid_env_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid configuration is reported as ConfigurationError."""
        monkeypatch.setenv("DND_CHARGEN_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
