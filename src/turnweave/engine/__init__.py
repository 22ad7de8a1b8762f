"""Simulation engine for turnweave.

This module provides the turn-driven simulation core: relationship
classification, gates, effect resolution, goal selection, movement
planning and application, round/turn scheduling, per-turn narration and
the run loop.

Submodules:
    relationships: Faction-based ally/hostile/neutral classification
    gates: Registry of inter-map gates
    effects: Effect resolution against unit property bags
    goals: Utility-based goal selection
    pathfinding: Deterministic BFS movement planning
    movement: Applying planned steps, gates and collision nudges
    turn_manager: Round/turn state machine and turn order
    storyteller: One-turn orchestration and the diary
    game_loop: Session loop and persistence on stop

Example:
    >>> from turnweave.engine import GameLoop, default_units
    >>> loop = GameLoop(world, units=default_units("main"))
    >>> loop.run(max_turns=5)
    5
"""

from __future__ import annotations

# =============================================================================
# Spatial Primitives
# =============================================================================
from turnweave.engine.spatial import (
    Collision,
    are_adjacent,
    distance_between_units,
    euclidean_distance,
    find_collisions,
    find_nearest_free_tile,
    manhattan_distance,
    neighbors,
    occupied_tiles,
    units_at,
)

# =============================================================================
# Relationships and Gates
# =============================================================================
from turnweave.engine.gates import GateRegistry
from turnweave.engine.relationships import (
    classify_factions,
    get_faction,
    get_relationship,
    is_ally,
    is_hostile,
    is_neutral,
)

# =============================================================================
# Effects, Conditions and Goals
# =============================================================================
from turnweave.engine.conditions import ConditionParser
from turnweave.engine.effects import EffectResolver
from turnweave.engine.goals import (
    GoalCandidate,
    GoalChoice,
    GoalContext,
    GoalSelector,
)
from turnweave.engine.catalog import (
    DEFAULT_GOALS,
    default_action_catalog,
    default_goals,
    default_units,
)

# =============================================================================
# Movement
# =============================================================================
from turnweave.engine.pathfinding import MovementPlan, MovementPlanner
from turnweave.engine.movement import (
    MovementApplier,
    MovementStepHandler,
    MovementStepUpdate,
)

# =============================================================================
# Turns and Orchestration
# =============================================================================
from turnweave.engine.roster import UnitRoster
from turnweave.engine.turn_manager import (
    SchedulerState,
    TurnOrderBuilder,
    TurnRecord,
    TurnScheduler,
)
from turnweave.engine.stat_tracker import StatTracker
from turnweave.engine.storyteller import StoryTeller
from turnweave.engine.game_loop import GameEvent, GameLoop, LoopSnapshot


__all__ = [
    # Spatial
    "Collision",
    "are_adjacent",
    "distance_between_units",
    "euclidean_distance",
    "find_collisions",
    "find_nearest_free_tile",
    "manhattan_distance",
    "neighbors",
    "occupied_tiles",
    "units_at",
    # Relationships and Gates
    "GateRegistry",
    "classify_factions",
    "get_faction",
    "get_relationship",
    "is_ally",
    "is_hostile",
    "is_neutral",
    # Effects, Conditions and Goals
    "ConditionParser",
    "EffectResolver",
    "GoalCandidate",
    "GoalChoice",
    "GoalContext",
    "GoalSelector",
    "DEFAULT_GOALS",
    "default_action_catalog",
    "default_goals",
    "default_units",
    # Movement
    "MovementPlan",
    "MovementPlanner",
    "MovementApplier",
    "MovementStepHandler",
    "MovementStepUpdate",
    # Turns and Orchestration
    "UnitRoster",
    "SchedulerState",
    "TurnOrderBuilder",
    "TurnRecord",
    "TurnScheduler",
    "StatTracker",
    "StoryTeller",
    "GameEvent",
    "GameLoop",
    "LoopSnapshot",
]
