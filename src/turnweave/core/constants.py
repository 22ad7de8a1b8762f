"""Simulation-wide constants for turnweave.

Thresholds, clamp bounds and action-type groupings shared by the goal
selector, effect engine, planners and storyteller.
"""

from __future__ import annotations

# =============================================================================
# Factions
# =============================================================================

DEFAULT_FACTION = "neutral"
"""Faction assumed for units with no (or a blank) faction property."""

# =============================================================================
# Effect Resolution
# =============================================================================

PROPERTY_BASELINE = 1
"""Value a missing property is initialized to before an effect applies."""

BOUNDED_PROPERTY_MAXIMUMS: dict[str, int] = {
    "health": 100,
    "mana": 100,
}
"""Upper clamp for properties with a domain maximum. Others are only floored at 0."""

PROPERTY_FLOOR = 0
"""Lower clamp applied to every numeric property after an effect."""

DEFAULT_ACTION_RANGE = 1
"""Manhattan range used when an action's payload declares none."""

DEFAULT_DIRECTIONS = (
    "north",
    "south",
    "east",
    "west",
    "northeast",
    "northwest",
    "southeast",
    "southwest",
)
"""Choices for random_direction payload descriptors without explicit options."""

DEFAULT_RESOURCES = ("gold", "wood", "stone", "food", "herbs", "ore")
"""Choices for random_resource payload descriptors without explicit options."""

# =============================================================================
# Goal Scoring
# =============================================================================

HEALTH_CRITICAL_RATIO = 0.30
"""Below this health ratio RecoverHealth scores HEALTH_CRITICAL_SCORE."""

HEALTH_LOW_RATIO = 0.60
"""Below this health ratio RecoverHealth scores HEALTH_LOW_SCORE."""

HEALTH_CRITICAL_SCORE = 100
HEALTH_LOW_SCORE = 75

MANA_CRITICAL_RATIO = 0.25
MANA_LOW_RATIO = 0.50
MANA_CRITICAL_SCORE = 70
MANA_LOW_SCORE = 45

ATTACK_HEALTH_RATIO = 0.35
"""Above this health ratio AttackEnemy scores ATTACK_CONFIDENT_SCORE."""

ATTACK_CONFIDENT_SCORE = 60
ATTACK_CAUTIOUS_SCORE = 25

EXPLORE_SCORE = 10
"""Explore is always a candidate at this score."""

# =============================================================================
# Units
# =============================================================================

DEAD_STATUS = "dead"
"""Status string that marks a unit as dead."""

LAST_ACTION_PROPERTY = "lastActionTurn"
"""Bookkeeping property written by the storyteller after a unit acts."""

# =============================================================================
# Action Types
# =============================================================================

TARGETED_ACTION_TYPES = frozenset({"interact", "attack", "support", "trade", "inspire"})
"""Action types that need an explicit target even without a hostile/ally role."""

HOSTILE_ACTION_TYPES = frozenset(
    {
        "attack",
        "desperate_attack",
        "ranged_attack",
        "shoot",
        "stab",
        "melee",
        "cast_attack",
    }
)
"""Action types aimed at hostile units."""

SUPPORT_ACTION_TYPES = frozenset({"support", "heal", "inspire"})
"""Action types aimed at allied units."""

EXPLORE_ACTION_TYPES = frozenset({"explore", "scout", "patrol"})
"""Action types that wander toward a random reachable tile."""

IDLE_ACTION_TYPE = "idle"

GATE_REVERSE_SUFFIX = "_reverse"
"""Suffix appended to the name of the reverse record of a bidirectional gate."""
