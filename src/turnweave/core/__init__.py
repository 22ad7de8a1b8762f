"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TurnweaveError: Base exception for all application errors.
        SimulationError and its planning, missing-data, effect and
        scheduler subclasses.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from turnweave.core.config import (
    Settings,
    SimulationSettings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from turnweave.core.exceptions import (
    ConfigurationError,
    EffectApplicationError,
    InvalidGameStateError,
    MapNotFoundError,
    MissingDataError,
    MissingPropertyError,
    NoGoalPositionsError,
    NoPathError,
    PersistenceError,
    PlanningError,
    SimulationError,
    TurnManagementError,
    TurnweaveError,
    UnitNotFoundError,
    ValidationError,
)
from turnweave.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "TurnweaveError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Simulation exceptions
    "SimulationError",
    "InvalidGameStateError",
    "TurnManagementError",
    "MissingDataError",
    "MissingPropertyError",
    "MapNotFoundError",
    "UnitNotFoundError",
    "PlanningError",
    "NoPathError",
    "NoGoalPositionsError",
    "EffectApplicationError",
    # Persistence exceptions
    "PersistenceError",
    # Configuration
    "Settings",
    "SimulationSettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
