"""Configuration management for turnweave.

Settings are loaded with pydantic-settings from environment variables
and an optional ``.env`` file. Each settings domain has its own prefix;
the aggregated ``Settings`` also accepts nested overrides using ``__``.

Example:
    >>> from turnweave.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.simulation.max_turns_per_session
    10

Environment Variables:
    TURNWEAVE_SIM_MAX_TURNS_PER_SESSION: Turns to run before a session stops
    TURNWEAVE_SIM_RUN_INDEFINITELY: Ignore the per-session turn limit
    TURNWEAVE_SIM_COOLDOWN_PERIOD: Turns a unit waits between actions
    TURNWEAVE_DATA_DIR: Directory holding persisted units, world and diary
    TURNWEAVE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from turnweave.core.exceptions import ConfigurationError


class SimulationSettings(BaseSettings):
    """Configuration for the turn loop and its subsystems.

    Attributes:
        max_turns_per_session: Turns to run before a session ends.
        run_indefinitely: Ignore max_turns_per_session.
        cooldown_period: Turns that must pass before a unit acts again
            when the storyteller picks actors without a scheduler.
        override_available_actions: Restrict every unit to these action types.
        clear_units_on_start: Discard persisted units when the loop starts.
        movement_step_cooldown_seconds: Pause between applied movement steps.
        respect_relationships: Gate damage/heal effects on relationships.
        random_seed: Seed for the shared random generator.
    """

    model_config = SettingsConfigDict(
        env_prefix="TURNWEAVE_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_turns_per_session: int = Field(
        default=10,
        ge=1,
        description="Turns to run before the session stops",
    )
    run_indefinitely: bool = Field(
        default=False,
        description="Ignore the per-session turn limit",
    )
    cooldown_period: int = Field(
        default=1,
        ge=1,
        description="Turns between two actions of the same unit",
    )
    override_available_actions: list[str] | None = Field(
        default=None,
        description="Restrict available actions to these types",
    )
    clear_units_on_start: bool = Field(
        default=False,
        description="Discard persisted units on start",
    )
    movement_step_cooldown_seconds: float = Field(
        default=0.0,
        ge=0,
        le=10,
        description="Pause between movement steps",
    )
    respect_relationships: bool = Field(
        default=False,
        description="Only damage hostiles and heal allies",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for reproducible runs",
    )


class StorageSettings(BaseSettings):
    """Configuration for persisted state files.

    Attributes:
        data_dir: Directory that holds every persisted file.
        units_file: File name for the unit roster.
        world_file: File name for the maps.
        gates_file: File name for the gate registry.
        diary_file: File name for the diary.
        actions_file: File name for the action catalog.
    """

    model_config = SettingsConfigDict(
        env_prefix="TURNWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for persisted state",
    )
    units_file: str = Field(default="units.json")
    world_file: str = Field(default="world.json")
    gates_file: str = Field(default="gates.json")
    diary_file: str = Field(default="diary.json")
    actions_file: str = Field(default="actions.json")

    @field_validator("data_dir", mode="after")
    @classmethod
    def ensure_directory_exists(cls, value: Path) -> Path:
        """Create the data directory if it is missing.

        Args:
            value: The path to validate and potentially create.

        Returns:
            The validated path.
        """
        value.mkdir(parents=True, exist_ok=True)
        return value


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Render logs as JSON.
        simulation: Turn loop settings.
        storage: Persistence settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="TURNWEAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="turnweave",
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
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON lines",
    )

    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
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
    "SimulationSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
