"""Pydantic V2 data model for turnweave.

Submodules:
    enums: Closed vocabularies (effect targets, operations, terrain...).
    units: Units, property records and positions.
    world: Tile maps, gates and the world container.
    actions: Actions, effects, results and diary entries.
    goals: Goal catalog definitions.
"""

from __future__ import annotations

from turnweave.models.actions import (
    Action,
    ActionCatalog,
    ActionResult,
    DiaryEntry,
    EffectDefinition,
    EffectValue,
    ExecutedAction,
    Requirement,
    StatChange,
)
from turnweave.models.enums import (
    ActionFailure,
    CompletionType,
    EffectOperation,
    EffectTarget,
    EffectValueType,
    GoalScope,
    LoopState,
    Relationship,
    SchedulerPhase,
    TerrainType,
)
from turnweave.models.goals import GoalCompletion, GoalDefinition
from turnweave.models.units import (
    MapPosition,
    Modifier,
    Point,
    PropertyRecord,
    Unit,
    UnitPosition,
    is_number,
)
from turnweave.models.world import Gate, TileMap, World


__all__ = [
    # Enums
    "ActionFailure",
    "CompletionType",
    "EffectOperation",
    "EffectTarget",
    "EffectValueType",
    "GoalScope",
    "LoopState",
    "Relationship",
    "SchedulerPhase",
    "TerrainType",
    # Units
    "Point",
    "MapPosition",
    "UnitPosition",
    "Modifier",
    "PropertyRecord",
    "Unit",
    "is_number",
    # World
    "Gate",
    "TileMap",
    "World",
    # Actions
    "EffectValue",
    "EffectDefinition",
    "Requirement",
    "Action",
    "ActionCatalog",
    "ActionResult",
    "ExecutedAction",
    "StatChange",
    "DiaryEntry",
    # Goals
    "GoalCompletion",
    "GoalDefinition",
]
