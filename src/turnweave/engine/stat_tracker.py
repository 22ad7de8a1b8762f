"""Before/after property diffs for diary entries."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

from turnweave.core.constants import LAST_ACTION_PROPERTY
from turnweave.models.actions import StatChange
from turnweave.models.units import MapPosition, Unit


Snapshot = dict[str, dict[str, Any]]
"""Unit id to property name to value."""

_IGNORED_PROPERTIES = frozenset({LAST_ACTION_PROPERTY})


def _plain(value: Any) -> Any:
    if isinstance(value, MapPosition):
        return value.model_dump(mode="json")
    return value


class StatTracker:
    """Captures unit properties and reports what changed."""

    @staticmethod
    def take_snapshot(units: Iterable[Unit]) -> Snapshot:
        """Copy every unit's current property values."""
        snapshot: Snapshot = {}
        for unit in units:
            snapshot[unit.id] = {
                name: json.loads(json.dumps(_plain(record.value), default=str))
                for name, record in unit.properties.items()
            }
        return snapshot

    @staticmethod
    def compare_snapshots(initial: Snapshot, units: Iterable[Unit]) -> list[StatChange]:
        """Properties whose value differs from the snapshot.

        Units and properties missing from either side are skipped, as is
        the ``lastActionTurn`` bookkeeping property.
        """
        changes = []
        for unit in units:
            before = initial.get(unit.id)
            if before is None:
                continue
            for name, record in unit.properties.items():
                if name in _IGNORED_PROPERTIES or name not in before:
                    continue
                current = json.loads(json.dumps(_plain(record.value), default=str))
                if before[name] != current:
                    changes.append(
                        StatChange(
                            unit_id=unit.id,
                            unit_name=unit.name,
                            property_name=name,
                            old_value=before[name],
                            new_value=current,
                        )
                    )
        return changes

    @staticmethod
    def format_stat_changes(changes: Sequence[StatChange]) -> list[str]:
        """Render changes as ``health: 70 -> 55`` lines."""
        return [
            f"{change.property_name}: {format_value(change.old_value)} -> {format_value(change.new_value)}"
            for change in changes
        ]

    @staticmethod
    def group_changes_by_unit(changes: Sequence[StatChange]) -> dict[str, list[StatChange]]:
        grouped: dict[str, list[StatChange]] = {}
        for change in changes:
            grouped.setdefault(change.unit_id, []).append(change)
        return grouped


def format_value(value: Any) -> str:
    """Positions read ``map (x, y)``; other structures are JSON."""
    if isinstance(value, dict) and "map_id" in value and isinstance(value.get("position"), dict):
        position = value["position"]
        return f"{value['map_id']} ({position.get('x')}, {position.get('y')})"
    if isinstance(value, dict | list):
        return json.dumps(value)
    return str(value)


__all__ = [
    "Snapshot",
    "StatTracker",
    "format_value",
]
