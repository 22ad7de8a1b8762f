"""Effect resolution: turns declarative effects into property mutations.

Given an action and the units in play, the resolver finds the effects
to run, resolves each effect's target set and scalar value, applies the
operation to the current (or base) value and clamps the result. A
failure inside one effect aborts the rest of the batch and is reported
as an unsuccessful ``ActionResult``; an effect whose target cannot be
found is logged and skipped.

Example:
    >>> resolver = EffectResolver(catalog)
    >>> result = resolver.execute_action_effect(action, units)
    >>> result.success
    True
"""

from __future__ import annotations

import math
import random
from collections.abc import Mapping, Sequence
from typing import Any

from turnweave.core.constants import (
    BOUNDED_PROPERTY_MAXIMUMS,
    DEAD_STATUS,
    DEFAULT_ACTION_RANGE,
    DEFAULT_DIRECTIONS,
    DEFAULT_RESOURCES,
    IDLE_ACTION_TYPE,
    PROPERTY_BASELINE,
    PROPERTY_FLOOR,
)
from turnweave.core.exceptions import EffectApplicationError, TurnweaveError
from turnweave.core.logging import get_logger
from turnweave.engine.relationships import get_relationship
from turnweave.engine.spatial import distance_between_units
from turnweave.models.actions import (
    Action,
    ActionCatalog,
    ActionResult,
    EffectDefinition,
    EffectValue,
)
from turnweave.models.enums import (
    ActionFailure,
    EffectOperation,
    EffectTarget,
    EffectValueType,
    Relationship,
)
from turnweave.models.units import Unit, is_number
from turnweave.models.world import World


logger = get_logger(__name__)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _normalize(value: float) -> int | float:
    """Store whole numbers as ints so 70 - 15 reads 55, not 55.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _is_random_range(value: Any) -> bool:
    return isinstance(value, dict) and value.get("type") == "random" and "min" in value and "max" in value


class EffectResolver:
    """Applies action effects to units.

    Attributes:
        catalog: Action definitions consulted when an action has no inline effects.
        world: When set, actions with an explicit target are range-checked.
        respect_relationships: Only let damage hit hostiles and heals hit allies.
    """

    def __init__(
        self,
        catalog: ActionCatalog | None = None,
        *,
        world: World | None = None,
        rng: random.Random | None = None,
        respect_relationships: bool = False,
        bounded_maximums: Mapping[str, int] = BOUNDED_PROPERTY_MAXIMUMS,
    ) -> None:
        self.catalog = catalog or ActionCatalog()
        self.world = world
        self.respect_relationships = respect_relationships
        self._rng = rng or random.Random()
        self._bounded_maximums = dict(bounded_maximums)

    def set_world(self, world: World | None) -> None:
        self.world = world

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get_action_range(self, action: Action) -> int | float:
        """The action's ``range`` payload entry, or the default range."""
        value = action.payload.get("range")
        if is_number(value):
            return value
        return DEFAULT_ACTION_RANGE

    def get_effects_for_action(self, action: Action) -> list[EffectDefinition]:
        """Effects for an action, in order of preference.

        Inline effects, then the catalog definition for the action type,
        then ``payload["effects"]``.
        """
        if action.effects:
            return list(action.effects)

        definition = self.catalog.find(action.type)
        if definition is not None and definition.effects:
            return list(definition.effects)

        raw = action.payload.get("effects")
        if isinstance(raw, list) and raw:
            logger.debug("Using payload effects", action_type=action.type)
            return [EffectDefinition.model_validate(item) for item in raw]
        return []

    def execute_action_effect(
        self,
        action: Action,
        units: Sequence[Unit],
        effects: Sequence[EffectDefinition] | None = None,
    ) -> ActionResult:
        """Run an action's effects against the given units.

        Args:
            action: The action being executed.
            units: Every unit in play; targets are resolved from these.
            effects: Explicit effects, bypassing ``get_effects_for_action``.

        Returns:
            A successful result, or a failure carrying the error message
            (and ``failure_type="range"`` for out-of-range targets).
        """
        try:
            to_execute = list(effects) if effects is not None else self.get_effects_for_action(action)
        except TurnweaveError as exc:
            return ActionResult.failed(exc.message, ActionFailure.EFFECT)

        if not to_execute:
            logger.debug("No effects for action", action_type=action.type)
            return ActionResult.ok()

        if self.world is not None:
            range_failure = self.validate_action_range(action, units)
            if range_failure is not None:
                logger.info(
                    "Range validation failed",
                    action_type=action.type,
                    reason=range_failure.error_message,
                )
                return range_failure

        for effect in to_execute:
            try:
                self._execute_single_effect(effect, action, units)
            except TurnweaveError as exc:
                logger.error(
                    "Effect application failed",
                    action_type=action.type,
                    property=effect.property_name,
                    error=exc.message,
                )
                return ActionResult.failed(exc.message, ActionFailure.EFFECT)

        return ActionResult.ok()

    def validate_action_range(self, action: Action, units: Sequence[Unit]) -> ActionResult | None:
        """Check that the action's explicit target is within its range.

        Returns:
            None when the action may proceed, else the failure result.
        """
        actor = self.find_actor(action, units)
        target_id = action.target_unit_id
        if actor is None or target_id is None:
            return None

        target = next((unit for unit in units if unit.id == target_id), None)
        if target is None:
            return ActionResult.failed(f"Target unit {target_id} not found")

        max_range = self.get_action_range(action)
        distance = distance_between_units(actor, target)
        if math.isinf(distance):
            return ActionResult.failed(
                f"Units {actor.id} and {target_id} are on different maps",
                ActionFailure.RANGE,
            )
        if distance > max_range:
            return ActionResult.failed(
                f"Target unit {target_id} is out of range. Distance: {distance}, Max range: {max_range}",
                ActionFailure.RANGE,
            )
        return None

    @staticmethod
    def find_actor(action: Action, units: Sequence[Unit]) -> Unit | None:
        """The acting unit, matched by id first and then by name."""
        by_id = next((unit for unit in units if unit.id == action.player), None)
        if by_id is not None:
            return by_id
        return next((unit for unit in units if unit.name == action.player), None)

    def default_action(self, unit: Unit) -> Action:
        """The idle action every unit can always fall back to."""
        return Action(
            type=IDLE_ACTION_TYPE,
            player=unit.id,
            description=f"{unit.name} idles, doing nothing of note.",
            payload={"target": "self"},
            effects=[],
        )

    def process_action_payload(self, payload: Mapping[str, Any], target_unit: Unit | None) -> dict[str, Any]:
        """Resolve randomized and computed descriptors in a payload.

        Supported descriptors (dicts with a ``type`` key):
            random: inclusive integer in ``[min, max]``.
            random_direction: one of ``directions`` (compass points by default).
            random_resource: one of ``resources``.
            calculated: ``base`` property of the target plus ``modifier``, floored at 0.

        Other entries are copied unchanged.
        """
        processed = dict(payload)
        for key, value in payload.items():
            if not isinstance(value, dict):
                continue
            match value.get("type"):
                case "random" if _is_random_range(value):
                    processed[key] = self._rng.randint(int(value["min"]), int(value["max"]))
                case "random_direction":
                    processed[key] = self._rng.choice(list(value.get("directions") or DEFAULT_DIRECTIONS))
                case "random_resource":
                    processed[key] = self._rng.choice(list(value.get("resources") or DEFAULT_RESOURCES))
                case "calculated":
                    modifier = value.get("modifier") or 0
                    base_name = value.get("base")
                    if target_unit is not None and base_name:
                        base = target_unit.get_property_value(base_name)
                        base = base if is_number(base) else 0
                        processed[key] = max(PROPERTY_FLOOR, base + modifier)
                    else:
                        processed[key] = modifier
        return processed

    def calculate_effect_value(self, descriptor: EffectValue, action: Action, target: Unit) -> int | float:
        """Compute the scalar an effect applies.

        ``calculation`` values resolve exactly like ``static`` ones; the
        expression is not evaluated.
        """
        match descriptor.type:
            case EffectValueType.STATIC | EffectValueType.CALCULATION:
                return descriptor.value if descriptor.value is not None else 0
            case EffectValueType.RANDOM:
                return self._rng.randint(descriptor.min, descriptor.max)
            case EffectValueType.VARIABLE:
                if descriptor.variable in action.payload:
                    return self._resolve_variable(descriptor.variable, action.payload[descriptor.variable])
                own = target.get_property_value(descriptor.variable)
                return own if is_number(own) else 0
        return 0

    def can_affect_target(self, effect: EffectDefinition, actor: Unit | None, target: Unit) -> bool:
        """Relationship filter used when ``respect_relationships`` is on.

        Damage (health subtract) needs a hostile target, healing (health
        add) an allied one; ally/enemy selectors need the matching
        relationship. Without an actor every target is allowed.
        """
        if actor is None:
            return True
        relationship = get_relationship(actor, target)
        if effect.property_name == "health" and effect.operation == EffectOperation.SUBTRACT:
            return relationship == Relationship.HOSTILE
        if effect.property_name == "health" and effect.operation == EffectOperation.ADD:
            return relationship == Relationship.ALLY
        if effect.target == EffectTarget.ALLY:
            return relationship == Relationship.ALLY
        if effect.target == EffectTarget.ENEMY:
            return relationship == Relationship.HOSTILE
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _resolve_variable(self, name: str, raw: Any) -> int | float:
        if _is_random_range(raw):
            return self._rng.randint(int(raw["min"]), int(raw["max"]))
        if is_number(raw):
            return raw
        if isinstance(raw, str):
            try:
                return _normalize(float(raw))
            except ValueError:
                pass
        raise EffectApplicationError(
            f"Payload variable '{name}' is not numeric",
            details={"variable": name, "value": raw},
        )

    def _resolve_targets(
        self,
        effect: EffectDefinition,
        action: Action,
        actor: Unit | None,
        units: Sequence[Unit],
    ) -> list[Unit]:
        target_id = action.target_unit_id
        explicit = next((unit for unit in units if unit.id == target_id), None) if target_id else None

        match effect.target:
            case EffectTarget.SELF:
                return [actor] if actor is not None else []
            case EffectTarget.TARGET | EffectTarget.UNIT:
                return [explicit] if explicit is not None else []
            case EffectTarget.ALL:
                return list(units)
            case EffectTarget.ALLY:
                targets = [actor] if actor is not None else []
                if explicit is not None and all(explicit.id != t.id for t in targets):
                    targets.append(explicit)
                return targets
            case EffectTarget.ENEMY:
                if explicit is not None:
                    return [explicit]
                for unit in units:
                    if actor is not None and unit.id == actor.id:
                        continue
                    if self.respect_relationships and not self.can_affect_target(effect, actor, unit):
                        continue
                    return [unit]
                return []
        return [actor] if actor is not None else []

    def _execute_single_effect(self, effect: EffectDefinition, action: Action, units: Sequence[Unit]) -> None:
        actor = self.find_actor(action, units)
        targets = self._resolve_targets(effect, action, actor, units)
        if not targets:
            logger.warning(
                "No target found for effect",
                action_type=action.type,
                target=str(effect.target),
                property=effect.property_name,
            )
            return

        for unit in targets:
            if self.respect_relationships and not self.can_affect_target(effect, actor, unit):
                logger.info(
                    "Effect skipped by relationship filter",
                    property=effect.property_name,
                    unit=unit.name,
                )
                continue
            self._apply_effect_to_unit(effect, unit, action)

    def _apply_effect_to_unit(self, effect: EffectDefinition, unit: Unit, action: Action) -> None:
        name = effect.property_name
        amount = self.calculate_effect_value(effect.value, action, unit)

        existing = unit.get_property_value(name)
        if existing is None:
            unit.set_property(name, PROPERTY_BASELINE)
        current = existing if is_number(existing) else PROPERTY_BASELINE

        match effect.operation:
            case EffectOperation.ADD:
                new_value = current + amount
            case EffectOperation.SUBTRACT:
                new_value = current - amount
            case EffectOperation.MULTIPLY:
                new_value = _round_half_up(current * amount)
            case EffectOperation.DIVIDE:
                if amount == 0:
                    raise EffectApplicationError(
                        f"Cannot divide '{name}' by zero",
                        property_name=name,
                        operation=str(effect.operation),
                    )
                new_value = _round_half_up(current / amount)
            case EffectOperation.SET:
                new_value = amount

        new_value = _normalize(self._clamp(name, new_value))
        if effect.permanent:
            unit.set_base_property(name, new_value)
        else:
            unit.set_property(name, new_value)

        if name == "health" and new_value <= 0:
            unit.set_property("status", DEAD_STATUS)
            logger.info("Unit died", unit=unit.name, unit_id=unit.id)

        logger.debug(
            "Effect applied",
            unit=unit.name,
            property=name,
            operation=str(effect.operation),
            old_value=existing,
            new_value=new_value,
            permanent=effect.permanent,
        )

    def _clamp(self, name: str, value: int | float) -> int | float:
        value = max(PROPERTY_FLOOR, value)
        maximum = self._bounded_maximums.get(name)
        if maximum is not None:
            value = min(maximum, value)
        return value


__all__ = [
    "EffectResolver",
]
