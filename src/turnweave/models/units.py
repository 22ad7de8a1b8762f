"""Unit and property-bag models.

A unit is an identity plus a bag of named property records. Each record
keeps a current ``value``, the ``base_value`` it derives from, optional
modifiers and a ``readonly`` flag. Values are a closed union of scalars,
a structured map position, or a plain mapping/list for free-form data.

Reads are default-on-read (``get_property_value`` returns ``None`` or a
caller-supplied default for absent properties). Code that cannot proceed
without a property uses ``require_property_value`` and gets a
``MissingPropertyError`` instead of a silent default.
"""

from __future__ import annotations

from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from turnweave.core.constants import DEAD_STATUS, DEFAULT_FACTION
from turnweave.core.exceptions import MissingPropertyError, ValidationError


# =============================================================================
# Positions
# =============================================================================


class Point(BaseModel):
    """Tile coordinate on a map."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    z: int | None = None


class MapPosition(BaseModel):
    """A tile on a specific map.

    Movement plans are sequences of these.
    """

    model_config = ConfigDict(frozen=True)

    map_id: str
    position: Point

    @classmethod
    def at(cls, map_id: str, x: int, y: int) -> Self:
        """Build a position from plain coordinates."""
        return cls(map_id=map_id, position=Point(x=x, y=y))

    @property
    def key(self) -> tuple[str, int, int]:
        """Hashable (map_id, x, y) identity of the tile."""
        return (self.map_id, self.position.x, self.position.y)


class UnitPosition(MapPosition):
    """Value shape of a unit's ``position`` property."""

    unit_id: str | None = None


Scalar = bool | int | float | str | None
PropertyValue = UnitPosition | Scalar | dict[str, Any] | list[Any]


def is_number(value: Any) -> bool:
    """Check for an int or float that is not a bool."""
    return isinstance(value, int | float) and not isinstance(value, bool)


# =============================================================================
# Property Records
# =============================================================================


class Modifier(BaseModel):
    """A named adjustment layered on a property's base value."""

    source: str
    value: float
    priority: int = 0


class PropertyRecord(BaseModel):
    """Stored state of a single named property."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    value: PropertyValue = None
    base_value: PropertyValue = None
    modifiers: list[Modifier] = Field(default_factory=list)
    readonly: bool = False

    def effective_value(self) -> PropertyValue:
        """Base value plus numeric modifiers in priority order.

        Non-numeric base values are returned unchanged.
        """
        if not is_number(self.base_value):
            return self.base_value
        total = self.base_value
        for modifier in sorted(self.modifiers, key=lambda m: m.priority):
            total += modifier.value
        if isinstance(self.base_value, int) and float(total).is_integer():
            return int(total)
        return total


# =============================================================================
# Unit
# =============================================================================


class Unit(BaseModel):
    """An autonomous agent with identity and a property bag.

    Attributes:
        id: Unique identifier.
        name: Display name.
        kind: Unit type used in narration (warrior, archer...).
        properties: Property name to record mapping.

    Example:
        >>> unit = Unit.from_values("Aria", kind="archer", health=70, faction="rangers")
        >>> unit.get_property_value("health")
        70
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    kind: str = Field(default="unit")
    properties: dict[str, PropertyRecord] = Field(default_factory=dict)

    @classmethod
    def from_values(
        cls,
        name: str,
        *,
        kind: str = "unit",
        unit_id: str | None = None,
        **values: Any,
    ) -> Self:
        """Create a unit whose properties start with value == base_value.

        Args:
            name: Display name.
            kind: Unit type.
            unit_id: Explicit id; generated when omitted.
            **values: Initial property values.

        Returns:
            The new unit.
        """
        unit = cls(id=unit_id or str(uuid4()), name=name, kind=kind)
        for prop_name, value in values.items():
            unit.set_property(prop_name, value)
        return unit

    # -------------------------------------------------------------------------
    # Property access
    # -------------------------------------------------------------------------

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def get_property(self, name: str) -> PropertyRecord | None:
        return self.properties.get(name)

    def get_property_value(self, name: str, default: Any = None) -> Any:
        """Return a property's current value, or ``default`` when absent."""
        record = self.properties.get(name)
        if record is None:
            return default
        return record.value

    def require_property_value(self, name: str) -> Any:
        """Return a property's current value.

        Raises:
            MissingPropertyError: If the property is absent or None.
        """
        value = self.get_property_value(name)
        if value is None:
            raise MissingPropertyError(
                f"Unit {self.name} has no '{name}' property",
                unit_id=self.id,
                property_name=name,
            )
        return value

    def set_property(self, name: str, value: Any, *, readonly: bool = False) -> None:
        """Write a property's current value, creating the record if needed.

        Raises:
            ValidationError: If the existing record is readonly.
        """
        record = self.properties.get(name)
        if record is None:
            self.properties[name] = PropertyRecord(value=value, base_value=value, readonly=readonly)
            return
        self._check_writable(name, record, value)
        record.value = value

    def set_base_property(self, name: str, value: Any) -> None:
        """Write a property's base value and recompute its current value.

        Raises:
            ValidationError: If the existing record is readonly.
        """
        record = self.properties.get(name)
        if record is None:
            self.properties[name] = PropertyRecord(value=value, base_value=value)
            return
        self._check_writable(name, record, value)
        record.base_value = value
        record.value = record.effective_value()

    def add_modifier(self, name: str, modifier: Modifier) -> None:
        """Attach a modifier to an existing property and recompute it."""
        record = self.properties.get(name)
        if record is None:
            raise MissingPropertyError(
                f"Unit {self.name} has no '{name}' property to modify",
                unit_id=self.id,
                property_name=name,
            )
        record.modifiers.append(modifier)
        record.value = record.effective_value()

    def _check_writable(self, name: str, record: PropertyRecord, value: Any) -> None:
        if record.readonly:
            raise ValidationError(
                f"Property '{name}' of unit {self.name} is readonly",
                field_name=name,
                invalid_value=value,
            )

    # -------------------------------------------------------------------------
    # Well-known properties
    # -------------------------------------------------------------------------

    @property
    def position(self) -> UnitPosition | None:
        """The unit's map position, or None when it has none."""
        value = self.get_property_value("position")
        if value is None:
            return None
        if isinstance(value, UnitPosition):
            return value
        if isinstance(value, dict):
            return UnitPosition.model_validate(value)
        return None

    def require_position(self) -> UnitPosition:
        """Return the unit's position.

        Raises:
            MissingPropertyError: If the unit has no position.
        """
        position = self.position
        if position is None:
            raise MissingPropertyError(
                f"Unit {self.name} has no position",
                unit_id=self.id,
                property_name="position",
            )
        return position

    def set_position(self, map_id: str, x: int, y: int, z: int | None = None) -> None:
        self.set_property(
            "position",
            UnitPosition(unit_id=self.id, map_id=map_id, position=Point(x=x, y=y, z=z)),
        )

    @property
    def faction(self) -> str:
        value = self.get_property_value("faction")
        if isinstance(value, str) and value.strip():
            return value
        return DEFAULT_FACTION

    def is_alive(self) -> bool:
        """A unit is alive unless marked dead or out of health."""
        if self.get_property_value("status") == DEAD_STATUS:
            return False
        health = self.get_property_value("health")
        return is_number(health) and health > 0

    def label(self) -> str:
        """Name and id for log lines."""
        return f"{self.name} ({self.id})"


__all__ = [
    "Point",
    "MapPosition",
    "UnitPosition",
    "Scalar",
    "PropertyValue",
    "is_number",
    "Modifier",
    "PropertyRecord",
    "Unit",
]
