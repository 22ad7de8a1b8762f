"""The set of live units the simulation operates on."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from turnweave.core.exceptions import UnitNotFoundError, ValidationError
from turnweave.core.logging import get_logger
from turnweave.models.units import Unit


logger = get_logger(__name__)


class UnitRoster:
    """Insertion-ordered collection of units keyed by id.

    The roster hands out live references; only the effect resolver and
    the movement applier should mutate them. Renderers use ``snapshot``.
    """

    def __init__(self, units: Iterable[Unit] | None = None) -> None:
        self._units: dict[str, Unit] = {}
        for unit in units or []:
            self.add(unit)

    def add(self, unit: Unit) -> None:
        """Add a unit.

        Raises:
            ValidationError: If a unit with the same id is already present.
        """
        if unit.id in self._units:
            raise ValidationError(
                f"Unit {unit.id} is already in the roster",
                field_name="id",
                invalid_value=unit.id,
            )
        self._units[unit.id] = unit
        logger.debug("Unit joined roster", unit=unit.name, unit_id=unit.id)

    def remove(self, unit_id: str) -> Unit | None:
        return self._units.pop(unit_id, None)

    def get(self, unit_id: str) -> Unit | None:
        return self._units.get(unit_id)

    def require(self, unit_id: str) -> Unit:
        """Return a unit by id.

        Raises:
            UnitNotFoundError: If no unit has that id.
        """
        unit = self._units.get(unit_id)
        if unit is None:
            raise UnitNotFoundError(f"Unit {unit_id} not found", unit_id=unit_id)
        return unit

    def find(self, id_or_name: str) -> Unit | None:
        """Look a unit up by id, then by name."""
        unit = self._units.get(id_or_name)
        if unit is not None:
            return unit
        return next((u for u in self._units.values() if u.name == id_or_name), None)

    def all(self) -> list[Unit]:
        return list(self._units.values())

    def alive(self) -> list[Unit]:
        return [unit for unit in self._units.values() if unit.is_alive()]

    def snapshot(self) -> list[Unit]:
        """Deep copies of every unit, safe to hand to read-only consumers."""
        return [unit.model_copy(deep=True) for unit in self._units.values()]

    def replace_all(self, units: Iterable[Unit]) -> None:
        self._units = {}
        for unit in units:
            self.add(unit)

    def clear(self) -> None:
        self._units = {}

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(list(self._units.values()))

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units


__all__ = [
    "UnitRoster",
]
