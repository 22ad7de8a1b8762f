"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from turnweave.core.config import (
    Settings,
    SimulationSettings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from turnweave.core.exceptions import ConfigurationError


class TestSimulationSettings:
    """Tests for SimulationSettings configuration."""

    def test_default_values(self) -> None:
        """Test default simulation settings."""
        settings = SimulationSettings()

        assert settings.max_turns_per_session == 10
        assert settings.run_indefinitely is False
        assert settings.cooldown_period == 1
        assert settings.override_available_actions is None
        assert settings.clear_units_on_start is False
        assert settings.movement_step_cooldown_seconds == 0.0
        assert settings.respect_relationships is False
        assert settings.random_seed is None

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from TURNWEAVE_SIM_ variables."""
        monkeypatch.setenv("TURNWEAVE_SIM_MAX_TURNS_PER_SESSION", "3")
        monkeypatch.setenv("TURNWEAVE_SIM_RUN_INDEFINITELY", "true")
        monkeypatch.setenv("TURNWEAVE_SIM_OVERRIDE_AVAILABLE_ACTIONS", '["rest", "attack"]')

        settings = SimulationSettings()

        assert settings.max_turns_per_session == 3
        assert settings.run_indefinitely is True
        assert settings.override_available_actions == ["rest", "attack"]

    def test_max_turns_must_be_positive(self) -> None:
        """Test that a session needs at least one turn."""
        with pytest.raises(ValueError):
            SimulationSettings(max_turns_per_session=0)


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_data_dir_created(self, tmp_path: Path) -> None:
        """Test the default data directory is created in the working directory."""
        settings = StorageSettings()

        assert settings.data_dir == Path("data")
        assert (tmp_path / "data").is_dir()

    def test_custom_data_dir(self, tmp_path: Path) -> None:
        """Test a custom data directory."""
        custom = tmp_path / "saves" / "run1"

        settings = StorageSettings(data_dir=custom)

        assert settings.data_dir == custom
        assert custom.is_dir()
        assert settings.units_file == "units.json"
        assert settings.diary_file == "diary.json"


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings initialization."""
        settings = Settings()

        assert settings.app_name == "turnweave"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.json_logs is False

    def test_debug_mode(self, mock_env_vars: dict[str, str]) -> None:
        """Test debug mode setting."""
        settings = Settings()

        assert settings.debug is True
        assert settings.is_production is False
        assert settings.log_level == "DEBUG"

    def test_nested_simulation_settings(self, mock_env_vars: dict[str, str]) -> None:
        """Test nested simulation settings pick up their own prefix."""
        settings = Settings()

        assert settings.simulation.max_turns_per_session == 25
        assert settings.simulation.cooldown_period == 2

    def test_is_production_property(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test is_production property."""
        monkeypatch.setenv("TURNWEAVE_DEBUG", "false")

        settings = Settings()

        assert settings.is_production is True


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_settings_instance(self) -> None:
        """Test that get_settings returns a Settings instance."""
        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Test that settings are cached."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_cache_clear(self) -> None:
        """Test that cache can be cleared."""
        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_invalid_configuration_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid values surface as ConfigurationError."""
        monkeypatch.setenv("TURNWEAVE_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()

        assert "Failed to load application settings" in str(exc_info.value)
