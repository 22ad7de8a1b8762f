"""Built-in goals, actions and starter units.

The simulation normally loads its action catalog from ``actions.json``;
the defaults here cover a fresh data directory and the test suite.
"""

from __future__ import annotations

from turnweave.models.actions import ActionCatalog
from turnweave.models.enums import CompletionType, GoalScope
from turnweave.models.goals import GoalCompletion, GoalDefinition
from turnweave.models.units import Unit


# =============================================================================
# Goals
# =============================================================================

DEFAULT_GOALS: tuple[GoalDefinition, ...] = (
    GoalDefinition(
        id="RecoverHealth",
        label="Recover Health",
        scope=GoalScope.UNIT,
        completion=GoalCompletion(type=CompletionType.STAT_AT_LEAST, stat="health", value=70),
        candidate_actions=["rest", "retreat", "meditate", "search"],
    ),
    GoalDefinition(
        id="RecoverMana",
        label="Recover Mana",
        scope=GoalScope.UNIT,
        completion=GoalCompletion(type=CompletionType.STAT_AT_LEAST, stat="mana", value=50),
        candidate_actions=["conserve_mana", "meditate", "rest"],
    ),
    GoalDefinition(
        id="AttackEnemy",
        label="Attack Enemy",
        scope=GoalScope.UNIT,
        completion=GoalCompletion(type=CompletionType.CONDITION_MET, condition="no_hostile_in_range"),
        candidate_actions=["attack", "desperate_attack"],
    ),
    GoalDefinition(
        id="Explore",
        label="Explore",
        scope=GoalScope.UNIT,
        completion=GoalCompletion(type=CompletionType.NONE),
        candidate_actions=["explore", "scout", "patrol"],
    ),
)


# =============================================================================
# Actions
# =============================================================================

_DEFAULT_ACTIONS = {
    "low_health": [
        {
            "type": "rest",
            "description": "{{unitName}} the {{unitType}} stops to catch their breath.",
            "requirements": [{"type": "comparison", "property": "health", "operator": "<=", "value": 60}],
            "effects": [
                {"target": "self", "property": "health", "operation": "add", "value": {"type": "static", "value": 10}}
            ],
        },
        {
            "type": "retreat",
            "description": "{{unitName}} falls back to regroup.",
            "requirements": [{"type": "comparison", "property": "health", "operator": "<=", "value": 40}],
            "effects": [
                {"target": "self", "property": "health", "operation": "add", "value": {"type": "static", "value": 5}}
            ],
        },
        {
            "type": "desperate_attack",
            "description": "{{unitName}} lashes out desperately at {{targetUnitName}}.",
            "requirements": [{"type": "comparison", "property": "health", "operator": "<=", "value": 30}],
            "payload": {"range": 1},
            "effects": [
                {
                    "target": "target",
                    "property": "health",
                    "operation": "subtract",
                    "value": {"type": "random", "min": 10, "max": 25},
                },
                {"target": "self", "property": "health", "operation": "subtract", "value": {"type": "static", "value": 5}},
            ],
        },
    ],
    "healthy": [
        {
            "type": "attack",
            "description": "{{unitName}} attacks {{targetUnitName}}.",
            "requirements": [{"type": "comparison", "property": "health", "operator": ">", "value": 30}],
            "payload": {"range": 1},
            "effects": [
                {"target": "target", "property": "health", "operation": "subtract", "value": {"type": "static", "value": 15}}
            ],
        },
        {
            "type": "explore",
            "description": "{{unitName}} explores the surroundings.",
            "payload": {"direction": {"type": "random_direction"}},
        },
        {
            "type": "scout",
            "description": "{{unitName}} scouts ahead.",
            "requirements": [{"type": "comparison", "property": "health", "operator": ">=", "value": 50}],
        },
    ],
    "default": [
        {
            "type": "meditate",
            "description": "{{unitName}} meditates quietly.",
            "effects": [
                {"target": "self", "property": "mana", "operation": "add", "value": {"type": "static", "value": 10}}
            ],
        },
        {
            "type": "conserve_mana",
            "description": "{{unitName}} holds back their power.",
            "effects": [
                {"target": "self", "property": "mana", "operation": "add", "value": {"type": "static", "value": 5}}
            ],
        },
        {
            "type": "search",
            "description": "{{unitName}} searches the area for supplies.",
            "payload": {"resource": {"type": "random_resource"}},
        },
        {
            "type": "support",
            "description": "{{unitName}} patches up {{targetUnitName}}.",
            "payload": {"range": 1},
            "effects": [
                {"target": "target", "property": "health", "operation": "add", "value": {"type": "static", "value": 8}}
            ],
        },
    ],
    "special": [
        {
            "type": "patrol",
            "description": "{{unitName}} patrols the perimeter.",
        },
    ],
}


def default_action_catalog() -> ActionCatalog:
    """A fresh copy of the built-in action catalog."""
    return ActionCatalog.model_validate(_DEFAULT_ACTIONS)


def default_goals() -> list[GoalDefinition]:
    return [goal.model_copy(deep=True) for goal in DEFAULT_GOALS]


# =============================================================================
# Units
# =============================================================================


def default_units(map_id: str | None = None) -> list[Unit]:
    """A warrior and an archer of opposing factions.

    Args:
        map_id: When given, the warrior starts at (0, 0) and the archer at
            (4, 4) on that map.
    """
    warrior = Unit.from_values(
        "Warrior",
        kind="warrior",
        health=100,
        mana=50,
        attack=20,
        defense=15,
        status="alive",
        maxHealth=100,
        maxMana=50,
        movementRange=3,
        experience=10,
        faction="vanguard",
    )
    archer = Unit.from_values(
        "Archer",
        kind="archer",
        health=70,
        mana=30,
        attack=25,
        defense=10,
        status="alive",
        maxHealth=70,
        maxMana=30,
        movementRange=4,
        experience=5,
        faction="rangers",
    )
    if map_id is not None:
        warrior.set_position(map_id, 0, 0)
        archer.set_position(map_id, 4, 4)
    return [warrior, archer]


__all__ = [
    "DEFAULT_GOALS",
    "default_action_catalog",
    "default_goals",
    "default_units",
]
