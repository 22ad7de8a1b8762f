"""Custom exception hierarchy for the turnweave simulation core.

All exceptions inherit from TurnweaveError so callers can handle every
simulation failure at one boundary while keeping domain context. Context
passed as keyword arguments is merged into ``details`` and rendered in
the exception message.

Example:
    >>> from turnweave.core.exceptions import NoPathError
    >>> raise NoPathError("No path found", unit_id="u-1", map_id="overworld")
"""

from __future__ import annotations

from typing import Any


class TurnweaveError(Exception):
    """Base exception for all turnweave errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Simulation Domain Exceptions
# =============================================================================


class SimulationError(TurnweaveError):
    """Base exception for simulation engine errors.

    Raised by the scheduler, planners and effect engine when an operation
    cannot be completed.
    """


class InvalidGameStateError(SimulationError):
    """Raised when an operation is attempted from the wrong loop state.

    For example, running a loop that has already been stopped.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The state the loop was in.
            expected_states: States in which the operation is valid.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class TurnManagementError(SimulationError):
    """Raised when the round/turn scheduler is misused.

    Starting a round with an empty order or while another round is in
    progress are programmer errors and always raise this exception.
    """

    def __init__(
        self,
        message: str,
        *,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize turn management error with round context.

        Args:
            message: Human-readable error description.
            round_number: Round the scheduler was in or asked to start.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class MissingDataError(SimulationError):
    """Base exception for data that must exist at the point of use.

    Fatal to the single operation being performed. The storyteller
    catches it, logs it and skips the actor's turn.
    """

    def __init__(
        self,
        message: str,
        *,
        unit_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize missing data error with unit context.

        Args:
            message: Human-readable error description.
            unit_id: Identifier of the unit involved, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if unit_id:
            combined_details["unit_id"] = unit_id
        super().__init__(message, details=combined_details)


class MissingPropertyError(MissingDataError):
    """Raised when a unit lacks a required property such as ``position``."""

    def __init__(
        self,
        message: str,
        *,
        unit_id: str | None = None,
        property_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if property_name:
            combined_details["property_name"] = property_name
        super().__init__(message, unit_id=unit_id, details=combined_details)


class MapNotFoundError(MissingDataError):
    """Raised when a map id is not registered in the world."""

    def __init__(
        self,
        message: str,
        *,
        map_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if map_id:
            combined_details["map_id"] = map_id
        super().__init__(message, details=combined_details)


class UnitNotFoundError(MissingDataError):
    """Raised when a unit id or name cannot be resolved in the roster."""


class PlanningError(SimulationError):
    """Base exception for movement planning failures.

    The two subclasses separate "nothing reachable" from "nothing to
    reach" so callers can react differently (retreat vs. wait).
    """

    def __init__(
        self,
        message: str,
        *,
        unit_id: str | None = None,
        map_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize planning error with mover context.

        Args:
            message: Human-readable error description.
            unit_id: Identifier of the moving unit.
            map_id: Map the search ran on.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if unit_id:
            combined_details["unit_id"] = unit_id
        if map_id:
            combined_details["map_id"] = map_id
        super().__init__(message, details=combined_details)


class NoPathError(PlanningError):
    """Raised when the search exhausts without reaching any goal tile."""


class NoGoalPositionsError(PlanningError):
    """Raised when no walkable, unoccupied tile lies within action range."""


class EffectApplicationError(SimulationError):
    """Raised while applying a single effect.

    Aborts the remaining effects in the batch. The effect engine reports
    it as an unsuccessful ActionResult instead of propagating it.
    """

    def __init__(
        self,
        message: str,
        *,
        property_name: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if property_name:
            combined_details["property_name"] = property_name
        if operation:
            combined_details["operation"] = operation
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration and Validation Exceptions
# =============================================================================


class ConfigurationError(TurnweaveError):
    """Raised when application configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(TurnweaveError):
    """Raised when data fails domain validation.

    Used for writes to readonly properties and malformed catalog entries.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(TurnweaveError):
    """Raised when persisted state cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


__all__ = [
    "TurnweaveError",
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
    "ConfigurationError",
    "ValidationError",
    "PersistenceError",
]
