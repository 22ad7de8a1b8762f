"""Tests for unit and property models."""

from __future__ import annotations

import pytest

from turnweave.core.constants import DEFAULT_FACTION
from turnweave.core.exceptions import MissingPropertyError, ValidationError
from turnweave.models import Modifier, PropertyRecord, Unit, UnitPosition


class TestPropertyRecord:
    """Tests for PropertyRecord."""

    def test_effective_value_applies_modifiers_by_priority(self) -> None:
        """Test modifiers stack on top of the base value."""
        record = PropertyRecord(
            value=10,
            base_value=10,
            modifiers=[Modifier(source="ring", value=2, priority=1), Modifier(source="curse", value=-5)],
        )
        assert record.effective_value() == 7

    def test_effective_value_non_numeric(self) -> None:
        """Test non-numeric base values pass through."""
        record = PropertyRecord(value="alive", base_value="alive")
        assert record.effective_value() == "alive"


class TestUnitProperties:
    """Tests for property bag access."""

    def test_from_values(self) -> None:
        """Test creating a unit from keyword values."""
        unit = Unit.from_values("Aria", kind="archer", unit_id="aria", health=70)

        assert unit.id == "aria"
        assert unit.kind == "archer"
        record = unit.get_property("health")
        assert record is not None
        assert record.value == 70
        assert record.base_value == 70

    def test_generated_id(self) -> None:
        """Test that ids are generated when omitted."""
        first = Unit.from_values("A")
        second = Unit.from_values("A")
        assert first.id != second.id

    def test_missing_property_defaults(self) -> None:
        """Test absent properties read as None or the default."""
        unit = Unit.from_values("Aria")
        assert unit.get_property_value("courage") is None
        assert unit.get_property_value("courage", 0) == 0
        assert not unit.has_property("courage")

    def test_require_missing_property(self) -> None:
        """Test require_property_value raises with context."""
        unit = Unit.from_values("Aria", unit_id="aria")

        with pytest.raises(MissingPropertyError) as exc_info:
            unit.require_property_value("health")

        assert exc_info.value.details["unit_id"] == "aria"
        assert exc_info.value.details["property_name"] == "health"

    def test_readonly_property_rejects_writes(self) -> None:
        """Test readonly records cannot be overwritten."""
        unit = Unit.from_values("Aria")
        unit.set_property("kind_id", "elite", readonly=True)

        with pytest.raises(ValidationError):
            unit.set_property("kind_id", "basic")
        with pytest.raises(ValidationError):
            unit.set_base_property("kind_id", "basic")
        assert unit.get_property_value("kind_id") == "elite"

    def test_set_property_keeps_base(self) -> None:
        """Test set_property only touches the current value."""
        unit = Unit.from_values("Aria", health=70)
        unit.set_property("health", 40)

        record = unit.get_property("health")
        assert record is not None
        assert record.value == 40
        assert record.base_value == 70

    def test_set_base_property_recomputes(self) -> None:
        """Test base writes recompute the current value from modifiers."""
        unit = Unit.from_values("Aria", attack=10)
        unit.add_modifier("attack", Modifier(source="sword", value=3))
        assert unit.get_property_value("attack") == 13

        unit.set_base_property("attack", 20)

        assert unit.get_property_value("attack") == 23

    def test_add_modifier_to_missing_property(self) -> None:
        """Test modifiers need an existing property."""
        unit = Unit.from_values("Aria")
        with pytest.raises(MissingPropertyError):
            unit.add_modifier("attack", Modifier(source="sword", value=3))


class TestUnitWellKnownProperties:
    """Tests for position, faction and liveness helpers."""

    def test_set_position(self) -> None:
        """Test position is stored as a UnitPosition."""
        unit = Unit.from_values("Aria", unit_id="aria")
        unit.set_position("main", 2, 3)

        position = unit.position
        assert isinstance(position, UnitPosition)
        assert position.key == ("main", 2, 3)
        assert position.unit_id == "aria"

    def test_position_from_dict(self) -> None:
        """Test a plain mapping value is read as a position."""
        unit = Unit.from_values("Aria", position={"map_id": "main", "position": {"x": 1, "y": 4}})
        assert unit.position is not None
        assert unit.position.key == ("main", 1, 4)

    def test_require_position(self) -> None:
        """Test require_position raises without a position."""
        unit = Unit.from_values("Aria")
        assert unit.position is None
        with pytest.raises(MissingPropertyError):
            unit.require_position()

    @pytest.mark.parametrize("value", [None, "", "   ", 3])
    def test_faction_defaults_to_neutral(self, value: object) -> None:
        """Test blank or non-string factions read as the default."""
        unit = Unit.from_values("Aria", faction=value)
        assert unit.faction == DEFAULT_FACTION

    @pytest.mark.parametrize(
        "values,alive",
        [
            ({"health": 10, "status": "alive"}, True),
            ({"health": 0, "status": "alive"}, False),
            ({"health": 10, "status": "dead"}, False),
            ({"status": "alive"}, False),
        ],
    )
    def test_is_alive(self, values: dict[str, object], alive: bool) -> None:
        """Test liveness from status and health."""
        unit = Unit.from_values("Aria", **values)
        assert unit.is_alive() is alive


class TestUnitSerialization:
    """Tests for JSON round-trips of units."""

    def test_position_survives_json(self) -> None:
        """Test a dumped unit reloads with a structured position."""
        unit = Unit.from_values("Aria", unit_id="aria", health=70, faction="rangers")
        unit.set_position("main", 4, 4)

        restored = Unit.model_validate_json(unit.model_dump_json())

        assert restored.position is not None
        assert restored.position.key == ("main", 4, 4)
        assert restored.get_property_value("health") == 70
        assert restored.faction == "rangers"
