"""Narrative orchestration of a single turn.

The storyteller picks the acting unit, asks the goal selector what it
wants, and walks the prioritized actions until one can be carried out:
approaching an out-of-range target, exploring, or executing effects.
Whatever happens is described, diffed against a snapshot of the units
and written to the diary.

Example:
    >>> teller = StoryTeller(roster, world, catalog=default_action_catalog())
    >>> executed = teller.generate_story_action(turn=1)
    >>> executed.action.description
    'Warrior attacks Archer.'
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

from turnweave.core.config import SimulationSettings, get_settings
from turnweave.core.constants import (
    EXPLORE_ACTION_TYPES,
    HOSTILE_ACTION_TYPES,
    LAST_ACTION_PROPERTY,
    SUPPORT_ACTION_TYPES,
    TARGETED_ACTION_TYPES,
)
from turnweave.core.exceptions import MissingDataError, PlanningError
from turnweave.core.logging import bind_context, clear_context, get_logger
from turnweave.engine.catalog import default_goals
from turnweave.engine.conditions import ConditionParser
from turnweave.engine.effects import EffectResolver
from turnweave.engine.gates import GateRegistry
from turnweave.engine.goals import GoalChoice, GoalContext, GoalSelector
from turnweave.engine.movement import MovementApplier, MovementStepHandler
from turnweave.engine.pathfinding import MovementPlanner
from turnweave.engine.relationships import is_ally, is_hostile
from turnweave.engine.roster import UnitRoster
from turnweave.engine.spatial import distance_between_units
from turnweave.engine.stat_tracker import StatTracker
from turnweave.engine.turn_manager import TurnScheduler
from turnweave.models.actions import Action, ActionCatalog, DiaryEntry, ExecutedAction, StatChange
from turnweave.models.goals import GoalDefinition
from turnweave.models.units import Unit, is_number
from turnweave.models.world import World


logger = get_logger(__name__)

_SYSTEM_ACTOR = "system"


def render_description(template: str, unit: Unit, target_name: str) -> str:
    """Fill ``{{unitName}}``, ``{{unitType}}`` and ``{{targetUnitName}}``."""
    return (
        template.replace("{{unitName}}", unit.name)
        .replace("{{unitType}}", unit.kind)
        .replace("{{targetUnitName}}", target_name)
    )


class StoryTeller:
    """Generates one executed action per turn.

    Attributes:
        roster: Live units.
        world: Maps the units stand on.
        gates: Gate registry shared by the planner and the applier.
        scheduler: When set, its current actor takes the turn.
        effects: Effect resolver, also the owner of the action catalog.
        goal_selector: Goal scoring.
        planner: Movement planning.
        mover: Movement application.
    """

    def __init__(
        self,
        roster: UnitRoster,
        world: World,
        *,
        catalog: ActionCatalog | None = None,
        goals: Sequence[GoalDefinition] | None = None,
        gates: GateRegistry | None = None,
        scheduler: TurnScheduler | None = None,
        settings: SimulationSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings().simulation
        self._rng = rng or random.Random(self.settings.random_seed)

        self.roster = roster
        self.world = world
        self.gates = gates or GateRegistry()
        self.scheduler = scheduler

        self.effects = EffectResolver(
            catalog,
            world=world,
            rng=self._rng,
            respect_relationships=self.settings.respect_relationships,
        )
        self.goal_selector = GoalSelector(goals if goals is not None else default_goals())
        self.planner = MovementPlanner(world, self.gates, rng=self._rng)
        self.mover = MovementApplier(
            world,
            roster,
            self.gates,
            step_cooldown_seconds=self.settings.movement_step_cooldown_seconds,
        )

        self._movement_step_handler: MovementStepHandler | None = None
        self._diary: list[DiaryEntry] = []
        self._story_history: list[str] = []

    def set_world(self, world: World) -> None:
        """Point every collaborator at a new world."""
        self.world = world
        self.effects.set_world(world)
        self.planner.world = world
        self.mover.world = world

    def set_movement_step_handler(self, handler: MovementStepHandler | None) -> None:
        self._movement_step_handler = handler

    # =========================================================================
    # Turn generation
    # =========================================================================

    def generate_story_action(self, turn: int) -> ExecutedAction | None:
        """Play one turn.

        Args:
            turn: Global turn number being played.

        Returns:
            The executed action, or None when no unit could act or the
            turn was skipped because of missing data.
        """
        actor: Unit | None = None
        try:
            actor = self._select_actor(turn)
            if actor is None:
                logger.info("No living unit can act", turn=turn)
                return None

            bind_context(actor_id=actor.id, actor_name=actor.name, turn=turn)
            return self._play_turn(actor, turn)
        except (MissingDataError, PlanningError) as exc:
            logger.warning(
                "Turn skipped",
                actor_name=actor.name if actor else None,
                actor_id=actor.id if actor else None,
                error=exc.message,
                error_type=type(exc).__name__,
            )
            label = actor.label() if actor else "unknown unit"
            self.log_system_diary_entry(
                f"Turn {turn} skipped for {label}: {exc.message}",
                turn=turn,
                actor_id=actor.id if actor else None,
            )
            return None
        finally:
            clear_context()

    def _select_actor(self, turn: int) -> Unit | None:
        if self.scheduler is not None and self.scheduler.round_in_progress:
            actor_id = self.scheduler.get_current_actor_id()
            if actor_id is not None:
                return self.roster.require(actor_id)

        alive = self.roster.alive()
        if not alive:
            return None

        cooldown = self.settings.cooldown_period
        rested = [unit for unit in alive if self._turns_since_last_action(unit, turn) >= cooldown]
        return self._rng.choice(rested or alive)

    @staticmethod
    def _turns_since_last_action(unit: Unit, turn: int) -> float:
        last = unit.get_property_value(LAST_ACTION_PROPERTY)
        if not is_number(last):
            return float("inf")
        return turn - last

    def _play_turn(self, actor: Unit, turn: int) -> ExecutedAction:
        units = self.roster.all()
        snapshot = StatTracker.take_snapshot(units)

        action = None
        if actor.is_alive():
            available = self.get_available_actions(actor)
            choice = self.goal_selector.choose_action(
                actor, GoalContext(available_actions=available, units=units, turn=turn)
            )
            self._log_goal_choice(actor, choice, turn)

            planning_failures: list[str] = []
            for definition in self._prioritize(choice, available):
                action = self._attempt(actor, definition, units, planning_failures)
                if action is not None:
                    break

            if action is None and planning_failures:
                self.log_system_diary_entry(
                    f"No action possible for {actor.label()} on turn {turn}: {'; '.join(planning_failures)}",
                    turn=turn,
                    actor_id=actor.id,
                )

        if action is None:
            action = self.effects.default_action(actor)

        actor.set_property(LAST_ACTION_PROPERTY, turn)
        changes = StatTracker.compare_snapshots(snapshot, units)
        self._log_stat_changes(action, changes)

        executed = ExecutedAction(turn=turn, action=action, **self._turn_metadata(actor))
        self._story_history.append(f"Turn {turn}: {action.description or action.type}")
        self._record(executed, changes)
        logger.info("Story action", turn=turn, action_type=action.type, description=action.description)
        return executed

    # =========================================================================
    # Action selection
    # =========================================================================

    def get_available_actions(self, unit: Unit) -> list[Action]:
        """Catalog actions whose requirements the unit meets.

        ``override_available_actions`` narrows the catalog first. When no
        action qualifies, the whole catalog is offered.

        Raises:
            MissingPropertyError: If a requirement names a property the
                unit does not have.
        """
        catalog = self.effects.catalog.all_actions()
        override = self.settings.override_available_actions

        available = []
        for action in catalog:
            if override and action.type not in override:
                continue
            if all(self._meets_requirement(unit, req.property_name, req.as_condition()) for req in action.requirements):
                available.append(action)

        if not available:
            return list(catalog)
        return available

    @staticmethod
    def _meets_requirement(unit: Unit, property_name: str, condition: str) -> bool:
        value = unit.require_property_value(property_name)
        if not is_number(value):
            return False
        return ConditionParser.evaluate_condition(condition, value)

    @staticmethod
    def _prioritize(choice: GoalChoice, available: list[Action]) -> list[Action]:
        goal_actions = list(choice.candidate_actions)
        rest = [action for action in available if all(action is not chosen for chosen in goal_actions)]
        return goal_actions + rest

    def select_target(self, unit: Unit, action: Action, units: Sequence[Unit]) -> Unit | None:
        """Nearest suitable target for an action, preferring ones in range.

        Attack types only consider hostile units. Support types prefer
        allies and fall back to any living unit.
        """
        action_type = action.type
        if action_type not in TARGETED_ACTION_TYPES | HOSTILE_ACTION_TYPES | SUPPORT_ACTION_TYPES:
            return None

        candidates = [other for other in units if other.id != unit.id and other.is_alive()]
        if action_type in HOSTILE_ACTION_TYPES:
            candidates = [other for other in candidates if is_hostile(unit, other)]
        elif action_type in SUPPORT_ACTION_TYPES:
            candidates = [other for other in candidates if is_ally(unit, other)] or candidates
        if not candidates:
            return None

        action_range = self.effects.get_action_range(action)
        by_distance = [(distance_between_units(unit, other), other) for other in candidates]
        reachable = [pair for pair in by_distance if pair[0] != float("inf")] or by_distance
        in_range = [pair for pair in reachable if pair[0] <= action_range]
        pool = in_range or reachable
        return min(pool, key=lambda pair: pair[0])[1]

    def _attempt(
        self,
        actor: Unit,
        definition: Action,
        units: list[Unit],
        planning_failures: list[str],
    ) -> Action | None:
        target = self.select_target(actor, definition, units)
        if definition.type in TARGETED_ACTION_TYPES and target is None:
            logger.info("Skipping action without target", action_type=definition.type, unit=actor.name)
            return None

        payload = self.effects.process_action_payload(definition.payload, target)
        if target is not None:
            payload["target_unit"] = target.id
        action = definition.model_copy(
            update={
                "player": actor.id,
                "payload": payload,
                "description": render_description(
                    definition.description,
                    actor,
                    target.name if target is not None else "another unit",
                ),
            },
            deep=True,
        )

        action_range = self.effects.get_action_range(action)
        if target is not None and distance_between_units(actor, target) > action_range:
            return self._approach(actor, target, action, units, action_range, planning_failures)

        explore_steps = []
        if action.type in EXPLORE_ACTION_TYPES:
            explore_steps = self.planner.plan_explore_movement(actor, units).steps
            action.payload["movement_path"] = [step.model_dump(mode="json") for step in explore_steps]

        result = self.effects.execute_action_effect(action, units)
        if not result.success:
            logger.warning(
                "Action failed, trying next candidate",
                action_type=action.type,
                reason=result.error_message,
                failure_type=result.failure_type,
            )
            return None

        if explore_steps:
            self.mover.apply_movement_path(actor.id, explore_steps, self._movement_step_handler)
        return action

    def _approach(
        self,
        actor: Unit,
        target: Unit,
        action: Action,
        units: list[Unit],
        action_range: int | float,
        planning_failures: list[str],
    ) -> Action | None:
        """Take one step toward an out-of-range target instead of acting.

        A target that cannot be reached only rules out this action; the
        failure is appended to ``planning_failures`` and None is returned.
        """
        try:
            plan = self.planner.plan_movement_toward_target(actor, target, units, action_range)
        except PlanningError as exc:
            logger.warning(
                "Cannot plan route to target, trying next candidate",
                action_type=action.type,
                actor=actor.label(),
                target=target.label(),
                error=exc.message,
                error_type=type(exc).__name__,
            )
            planning_failures.append(f"{action.type} toward {target.label()}: {exc.message}")
            return None

        if not plan.steps:
            logger.info("Target out of range and unit cannot move", action_type=action.type, target=target.name)
            return None

        applied = self.mover.apply_movement_path(actor.id, plan.steps[:1], self._movement_step_handler)
        if applied == 0:
            return None

        action.payload["moved_towards_target"] = plan.moved_towards_target
        action.payload["movement_path"] = [step.model_dump(mode="json") for step in plan.steps]
        action.description = f"{actor.name} is moving closer to {target.name}"
        logger.info(
            "Moved toward target",
            action_type=action.type,
            target=target.name,
            remaining_steps=len(plan.steps) - applied,
        )
        return action

    # =========================================================================
    # Records
    # =========================================================================

    def _round_metadata(self) -> dict[str, Any]:
        if self.scheduler is None or not self.scheduler.round_in_progress:
            return {}
        return {
            "round": self.scheduler.get_current_round(),
            "turn_in_round": self.scheduler.get_turn_index_in_round() + 1,
            "turn_order": self.scheduler.get_turn_order(),
        }

    def _turn_metadata(self, actor: Unit) -> dict[str, Any]:
        return {**self._round_metadata(), "actor_id": actor.id}

    def _record(self, executed: ExecutedAction, changes: list[StatChange]) -> None:
        entry = DiaryEntry(
            **executed.model_dump(),
            stat_changes=changes,
            stat_changes_summary=self.format_stat_change_summary(changes),
        )
        self._diary.append(entry)

    @staticmethod
    def format_stat_change_summary(changes: Sequence[StatChange]) -> list[str]:
        """One ``Name: prop: old -> new, ...`` line per unit."""
        summaries = []
        for unit_changes in StatTracker.group_changes_by_unit(changes).values():
            lines = StatTracker.format_stat_changes(unit_changes)
            summaries.append(f"{unit_changes[0].unit_name}: {', '.join(lines)}")
        return summaries

    def log_system_diary_entry(
        self,
        message: str,
        *,
        turn: int | None = None,
        actor_id: str | None = None,
        entry_type: str = "system_error",
    ) -> DiaryEntry:
        """Record an engine-level event (usually an error) in the diary."""
        last = self._diary[-1] if self._diary else None
        metadata = self._round_metadata()
        entry = DiaryEntry(
            turn=turn if turn is not None else (last.turn if last else 0),
            action=Action(
                type=entry_type,
                player=actor_id or _SYSTEM_ACTOR,
                description=message,
                payload={"severity": "error"},
            ),
            round=metadata.get("round", last.round if last else 0),
            turn_in_round=metadata.get("turn_in_round", last.turn_in_round if last else 0),
            turn_order=metadata.get("turn_order", last.turn_order if last else []),
            actor_id=actor_id or _SYSTEM_ACTOR,
        )
        self._diary.append(entry)
        return entry

    def load_diary(self, entries: Sequence[DiaryEntry]) -> None:
        self._diary = list(entries)

    def get_diary(self) -> list[DiaryEntry]:
        return list(self._diary)

    def get_story_history(self) -> list[str]:
        return list(self._story_history)

    def get_latest_story(self) -> str | None:
        return self._story_history[-1] if self._story_history else None

    # =========================================================================
    # Logging helpers
    # =========================================================================

    def _log_goal_choice(self, actor: Unit, choice: GoalChoice, turn: int) -> None:
        for candidate in choice.goal_candidates:
            logger.debug(
                "Goal evaluated",
                unit=actor.name,
                goal=candidate.goal.id,
                score=candidate.score,
                reason=candidate.reason,
                actions=[action.type for action in candidate.actions],
            )
        logger.info(
            "Goal selected",
            unit=actor.name,
            goal=choice.goal.id,
            action_type=choice.action.type if choice.action else None,
            reason=choice.reason,
            turn=turn,
        )

    def _log_stat_changes(self, action: Action, changes: list[StatChange]) -> None:
        for unit_changes in StatTracker.group_changes_by_unit(changes).values():
            logger.info(
                "Stat changes",
                action_type=action.type,
                unit=unit_changes[0].unit_name,
                changes=StatTracker.format_stat_changes(unit_changes),
            )


__all__ = [
    "StoryTeller",
    "render_description",
]
