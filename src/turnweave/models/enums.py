"""Enumeration types for turnweave.

Closed vocabularies for effect targets and operations, relationships,
goal descriptors, terrain and scheduler phases. Catalog data loaded
from JSON is validated against these enums.
"""

from __future__ import annotations

from enum import StrEnum


class Relationship(StrEnum):
    """Disposition of one unit toward another."""

    ALLY = "ally"
    NEUTRAL = "neutral"
    HOSTILE = "hostile"


class EffectTarget(StrEnum):
    """Which units an effect is applied to."""

    SELF = "self"
    """The acting unit."""

    TARGET = "target"
    """The unit named in the action payload."""

    UNIT = "unit"
    """Alias of TARGET kept for catalog compatibility."""

    ALL = "all"
    """Every unit, once each."""

    ALLY = "ally"
    """The acting unit and the explicit target."""

    ENEMY = "enemy"
    """The explicit target, or any other unit."""


class EffectOperation(StrEnum):
    """Arithmetic applied to a property's current value."""

    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    SET = "set"


class EffectValueType(StrEnum):
    """How an effect's scalar value is computed."""

    STATIC = "static"
    CALCULATION = "calculation"
    VARIABLE = "variable"
    RANDOM = "random"


class GoalScope(StrEnum):
    """Who a goal is pursued by."""

    UNIT = "unit"
    SQUAD = "squad"


class CompletionType(StrEnum):
    """How a goal declares itself satisfied."""

    STAT_AT_LEAST = "stat_at_least"
    CONDITION_MET = "condition_met"
    NONE = "none"


class ActionFailure(StrEnum):
    """Why an action failed to execute."""

    RANGE = "range"
    """Target was beyond the action's range."""

    EFFECT = "effect"
    """An effect raised while being applied."""


class TerrainType(StrEnum):
    """Tile terrain. Water, mountain and wall block movement."""

    PLAINS = "plains"
    GRASS = "grass"
    FOREST = "forest"
    ROAD = "road"
    SAND = "sand"
    SWAMP = "swamp"
    SNOW = "snow"
    WATER = "water"
    MOUNTAIN = "mountain"
    WALL = "wall"

    @property
    def is_walkable(self) -> bool:
        """Whether units may step onto this terrain."""
        return self not in _UNWALKABLE


_UNWALKABLE = frozenset({TerrainType.WATER, TerrainType.MOUNTAIN, TerrainType.WALL})


class SchedulerPhase(StrEnum):
    """Round/turn scheduler states."""

    IDLE = "idle"
    """No round in progress; a new round may start."""

    ROUND_ACTIVE = "round_active"
    """Turn order fixed; advancing one actor at a time."""


class LoopState(StrEnum):
    """Lifecycle of the simulation run loop."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


__all__ = [
    "Relationship",
    "EffectTarget",
    "EffectOperation",
    "EffectValueType",
    "GoalScope",
    "CompletionType",
    "ActionFailure",
    "TerrainType",
    "SchedulerPhase",
    "LoopState",
]
