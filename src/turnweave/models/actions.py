"""Action, effect and diary models.

Actions are loaded from a catalog grouped by health band or built ad
hoc. Effects are declarative property mutations; the effect engine
interprets them. Diary entries record what each turn did.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from turnweave.models.enums import (
    ActionFailure,
    EffectOperation,
    EffectTarget,
    EffectValueType,
)
from turnweave.models.units import is_number


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Effects
# =============================================================================


class EffectValue(BaseModel):
    """How an effect's scalar is obtained.

    A bare number in catalog data is accepted as a static value.
    """

    type: EffectValueType = EffectValueType.STATIC
    value: int | float | None = None
    variable: str | None = None
    expression: str | None = None
    min: int | None = None
    max: int | None = None

    @model_validator(mode="before")
    @classmethod
    def coerce_shorthand(cls, data: Any) -> Any:
        if is_number(data):
            return {"type": EffectValueType.STATIC, "value": data}
        return data

    @model_validator(mode="after")
    def check_kind_fields(self) -> Self:
        if self.type == EffectValueType.RANDOM:
            if self.min is None or self.max is None:
                raise ValueError("random effect values need min and max")
            if self.min > self.max:
                raise ValueError(f"random range min {self.min} exceeds max {self.max}")
        if self.type == EffectValueType.VARIABLE and not self.variable:
            raise ValueError("variable effect values need a variable name")
        return self


class EffectDefinition(BaseModel):
    """A single declarative property mutation.

    Attributes:
        target: Which units receive the effect.
        property_name: Property to mutate (``property`` in catalog data).
        operation: Arithmetic applied to the current value.
        value: Value specification.
        permanent: Write to the base value instead of the current value.
    """

    model_config = ConfigDict(populate_by_name=True)

    target: EffectTarget = EffectTarget.SELF
    property_name: str = Field(alias="property", min_length=1)
    operation: EffectOperation = EffectOperation.ADD
    value: EffectValue = Field(default_factory=EffectValue)
    permanent: bool = False

    @field_validator("target", mode="before")
    @classmethod
    def default_missing_target(cls, value: Any) -> Any:
        return EffectTarget.SELF if value in (None, "") else value


# =============================================================================
# Actions
# =============================================================================


class Requirement(BaseModel):
    """Comparison a unit's property must satisfy for an action to be offered."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["comparison"] = "comparison"
    property_name: str = Field(alias="property")
    operator: Literal["<=", ">=", "<", ">"]
    value: float

    def as_condition(self) -> str:
        """Render as a condition string, e.g. ``health <= 30``."""
        return f"{self.property_name} {self.operator} {self.value:g}"


class Action(BaseModel):
    """A concrete behavior a unit can perform.

    Attributes:
        type: Action type, matched against goal candidate lists.
        player: Id (or name) of the acting unit.
        description: Narration template.
        requirements: Conditions for the action to be available.
        payload: Free-form parameters (``target_unit``, ``range``...).
        effects: Inline effects, overriding the catalog definition.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(min_length=1)
    player: str = ""
    description: str = ""
    requirements: list[Requirement] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)
    effects: list[EffectDefinition] | None = None

    @property
    def target_unit_id(self) -> str | None:
        """Explicit target id from ``target_unit``, or ``targetUnit`` in catalog data."""
        for key in ("target_unit", "targetUnit"):
            target = self.payload.get(key)
            if isinstance(target, str) and target:
                return target
        return None


class ActionCatalog(BaseModel):
    """Static action definitions grouped by health band."""

    low_health: list[Action] = Field(default_factory=list)
    healthy: list[Action] = Field(default_factory=list)
    default: list[Action] = Field(default_factory=list)
    special: list[Action] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def unwrap_actions_key(cls, data: Any) -> Any:
        """Accept ``{"actions": {...bands...}, "special": [...]}`` documents."""
        if isinstance(data, dict) and isinstance(data.get("actions"), dict):
            merged = dict(data["actions"])
            merged.setdefault("special", data.get("special", []))
            return merged
        return data

    def all_actions(self) -> list[Action]:
        return [*self.low_health, *self.healthy, *self.default, *self.special]

    def find(self, action_type: str) -> Action | None:
        """First definition of ``action_type`` across all bands."""
        return next((a for a in self.all_actions() if a.type == action_type), None)


class ActionResult(BaseModel):
    """Outcome of executing an action's effects."""

    success: bool
    error_message: str | None = None
    failure_type: ActionFailure | None = None

    @classmethod
    def ok(cls) -> Self:
        return cls(success=True)

    @classmethod
    def failed(cls, message: str, failure_type: ActionFailure | None = None) -> Self:
        return cls(success=False, error_message=message, failure_type=failure_type)


# =============================================================================
# Turn records
# =============================================================================


class ExecutedAction(BaseModel):
    """An action as it was carried out on a given turn."""

    turn: int
    timestamp: datetime = Field(default_factory=_utcnow)
    action: Action
    round: int | None = None
    turn_in_round: int | None = None
    turn_order: list[str] = Field(default_factory=list)
    actor_id: str | None = None


class StatChange(BaseModel):
    """One property of one unit that changed during a turn."""

    unit_id: str
    unit_name: str
    property_name: str
    old_value: Any = None
    new_value: Any = None


class DiaryEntry(BaseModel):
    """Persistent record of a turn."""

    turn: int
    timestamp: datetime = Field(default_factory=_utcnow)
    action: Action
    round: int | None = None
    turn_in_round: int | None = None
    turn_order: list[str] = Field(default_factory=list)
    actor_id: str | None = None
    stat_changes: list[StatChange] = Field(default_factory=list)
    stat_changes_summary: list[str] = Field(default_factory=list)


__all__ = [
    "EffectValue",
    "EffectDefinition",
    "Requirement",
    "Action",
    "ActionCatalog",
    "ActionResult",
    "ExecutedAction",
    "StatChange",
    "DiaryEntry",
]
