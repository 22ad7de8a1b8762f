"""turnweave - turn-based multi-agent narrative simulation core.

Autonomous units live on tile maps linked by gates. Every turn one unit
acts: it scores its goals, picks an action, approaches or explores when
it has to, and applies the action's effects. Each turn is narrated and
recorded in a diary with the stat changes it caused.

Example:
    >>> from turnweave import GameLoop, TileMap, World, default_units
    >>>
    >>> world = World()
    >>> world.add_map(TileMap(name="main", width=10, height=10))
    >>> loop = GameLoop(world, units=default_units("main"))
    >>> loop.run(max_turns=3)
    3
    >>> len(loop.storyteller.get_diary())
    3

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 models for units, maps, actions and goals.
    engine: Scheduling, goals, effects, movement and the run loop.
    storage: JSON persistence.
"""

from __future__ import annotations

# Core
from turnweave.core.config import Settings, get_settings
from turnweave.core.exceptions import TurnweaveError
from turnweave.core.logging import configure_logging, get_logger

# Models
from turnweave.models import (
    Action,
    ActionCatalog,
    DiaryEntry,
    EffectDefinition,
    Gate,
    GoalDefinition,
    Point,
    TileMap,
    Unit,
    World,
)

# Engine
from turnweave.engine import (
    EffectResolver,
    GameLoop,
    GateRegistry,
    GoalSelector,
    MovementApplier,
    MovementPlanner,
    StoryTeller,
    TurnScheduler,
    default_action_catalog,
    default_units,
)

# Storage
from turnweave.storage import JsonStore


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "TurnweaveError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Action",
    "ActionCatalog",
    "DiaryEntry",
    "EffectDefinition",
    "Gate",
    "GoalDefinition",
    "Point",
    "TileMap",
    "Unit",
    "World",
    # Engine
    "EffectResolver",
    "GameLoop",
    "GateRegistry",
    "GoalSelector",
    "MovementApplier",
    "MovementPlanner",
    "StoryTeller",
    "TurnScheduler",
    "default_action_catalog",
    "default_units",
    # Storage
    "JsonStore",
]
