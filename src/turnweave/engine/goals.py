"""Utility-based goal selection.

Each known goal has a scorer that looks at the unit's health and mana
ratios (and, for AttackEnemy, whether a hostile unit is around).
Candidates are ranked by score, with catalog order breaking ties, and
the first goal that maps to an available action wins.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from turnweave.core.constants import (
    ATTACK_CAUTIOUS_SCORE,
    ATTACK_CONFIDENT_SCORE,
    ATTACK_HEALTH_RATIO,
    EXPLORE_SCORE,
    HEALTH_CRITICAL_RATIO,
    HEALTH_CRITICAL_SCORE,
    HEALTH_LOW_RATIO,
    HEALTH_LOW_SCORE,
    MANA_CRITICAL_RATIO,
    MANA_CRITICAL_SCORE,
    MANA_LOW_RATIO,
    MANA_LOW_SCORE,
)
from turnweave.core.logging import get_logger
from turnweave.engine.relationships import is_hostile
from turnweave.models.actions import Action
from turnweave.models.enums import CompletionType
from turnweave.models.goals import GoalCompletion, GoalDefinition
from turnweave.models.units import Unit, is_number


logger = get_logger(__name__)


@dataclass
class GoalContext:
    """Inputs to a goal decision.

    Attributes:
        available_actions: Actions the unit may take this turn.
        units: Every unit in play. None means unknown, in which case
            hostiles are assumed to exist.
        turn: Current global turn.
    """

    available_actions: list[Action] = field(default_factory=list)
    units: Sequence[Unit] | None = None
    turn: int = 0


@dataclass
class GoalCandidate:
    """A goal that scored for a unit, with the actions it could use."""

    goal: GoalDefinition
    score: int
    reason: str
    actions: list[Action] = field(default_factory=list)


@dataclass
class GoalChoice:
    """Outcome of goal selection."""

    goal: GoalDefinition
    action: Action | None
    candidate_actions: list[Action]
    reason: str
    goal_candidates: list[GoalCandidate] = field(default_factory=list)


@dataclass
class _Ratios:
    health: float
    mana: float


def numeric_property(unit: Unit, name: str) -> float:
    """A number stored directly or as ``{"value": n}``; anything else is 0."""
    value: Any = unit.get_property_value(name)
    if is_number(value):
        return value
    if isinstance(value, dict) and is_number(value.get("value")):
        return value["value"]
    return 0


def _ratio(current: float, maximum: float) -> float:
    return current / maximum if maximum > 0 else 1.0


def default_goal() -> GoalDefinition:
    return GoalDefinition(
        id="Default",
        label="Default",
        completion=GoalCompletion(type=CompletionType.NONE),
        candidate_actions=[],
    )


class GoalSelector:
    """Scores goals for a unit and picks an executable action.

    Example:
        >>> selector = GoalSelector(DEFAULT_GOALS)
        >>> choice = selector.choose_action(unit, GoalContext(available_actions=actions))
        >>> choice.goal.id
        'RecoverHealth'
    """

    def __init__(self, goals: Sequence[GoalDefinition] | None = None) -> None:
        self.goals: list[GoalDefinition] = list(goals or [])
        self._scorers: dict[str, Callable[[Unit, _Ratios, GoalContext], tuple[int, str] | None]] = {
            "RecoverHealth": self._score_recover_health,
            "RecoverMana": self._score_recover_mana,
            "AttackEnemy": self._score_attack_enemy,
            "Explore": self._score_explore,
        }

    def choose_action(self, unit: Unit, context: GoalContext) -> GoalChoice:
        """Pick a goal and the action that serves it.

        Args:
            unit: The deciding unit.
            context: Available actions and surrounding units.

        Returns:
            The chosen goal and action. ``action`` is None only when no
            actions are available at all.
        """
        candidates = self.evaluate_goals(unit, context)
        for candidate in candidates:
            candidate.actions = self.get_actions_for_goal(candidate.goal, context.available_actions)

        ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
        for candidate in ranked:
            if candidate.actions:
                logger.debug(
                    "Goal chosen",
                    unit=unit.name,
                    goal=candidate.goal.id,
                    score=candidate.score,
                    action=candidate.actions[0].type,
                )
                return GoalChoice(
                    goal=candidate.goal,
                    action=candidate.actions[0],
                    candidate_actions=candidate.actions,
                    reason=candidate.reason,
                    goal_candidates=ranked,
                )

        available = context.available_actions
        if ranked:
            goal = ranked[0].goal
        elif self.goals:
            goal = self.goals[0]
        else:
            goal = default_goal()
        reason = ranked[0].reason if ranked else "Fallback selection"
        logger.debug("No goal has an available action", unit=unit.name, goal=goal.id)
        return GoalChoice(
            goal=goal,
            action=available[0] if available else None,
            candidate_actions=list(available),
            reason=reason,
            goal_candidates=ranked,
        )

    def evaluate_goals(self, unit: Unit, context: GoalContext) -> list[GoalCandidate]:
        """Score every catalog goal that has a scorer, in catalog order."""
        ratios = _Ratios(
            health=_ratio(numeric_property(unit, "health"), numeric_property(unit, "maxHealth")),
            mana=_ratio(numeric_property(unit, "mana"), numeric_property(unit, "maxMana")),
        )
        candidates = []
        for goal in self.goals:
            scorer = self._scorers.get(goal.id)
            if scorer is None:
                continue
            scored = scorer(unit, ratios, context)
            if scored is not None:
                score, reason = scored
                candidates.append(GoalCandidate(goal=goal, score=score, reason=reason))
        return candidates

    @staticmethod
    def get_actions_for_goal(goal: GoalDefinition, available_actions: Sequence[Action]) -> list[Action]:
        """Available actions matching the goal's candidates, in goal order."""
        actions = []
        for action_type in goal.candidate_actions:
            found = next((a for a in available_actions if a.type == action_type), None)
            if found is not None:
                actions.append(found)
        return actions

    # -------------------------------------------------------------------------
    # Scorers
    # -------------------------------------------------------------------------

    def _score_recover_health(self, unit: Unit, ratios: _Ratios, context: GoalContext) -> tuple[int, str] | None:
        if ratios.health < HEALTH_CRITICAL_RATIO:
            return HEALTH_CRITICAL_SCORE, "Health critically low"
        if ratios.health < HEALTH_LOW_RATIO:
            return HEALTH_LOW_SCORE, "Health below comfort threshold"
        return None

    def _score_recover_mana(self, unit: Unit, ratios: _Ratios, context: GoalContext) -> tuple[int, str] | None:
        if ratios.mana >= MANA_LOW_RATIO:
            return None
        score = MANA_CRITICAL_SCORE if ratios.mana < MANA_CRITICAL_RATIO else MANA_LOW_SCORE
        return score, "Mana running low"

    def _score_attack_enemy(self, unit: Unit, ratios: _Ratios, context: GoalContext) -> tuple[int, str] | None:
        if not self._has_hostile(unit, context.units):
            return None
        score = ATTACK_CONFIDENT_SCORE if ratios.health > ATTACK_HEALTH_RATIO else ATTACK_CAUTIOUS_SCORE
        return score, "Default offensive posture"

    def _score_explore(self, unit: Unit, ratios: _Ratios, context: GoalContext) -> tuple[int, str] | None:
        return EXPLORE_SCORE, "Fallback exploration"

    @staticmethod
    def _has_hostile(unit: Unit, units: Sequence[Unit] | None) -> bool:
        if units is None:
            return True
        return any(other.id != unit.id and other.is_alive() and is_hostile(unit, other) for other in units)


__all__ = [
    "GoalContext",
    "GoalCandidate",
    "GoalChoice",
    "GoalSelector",
    "numeric_property",
    "default_goal",
]
