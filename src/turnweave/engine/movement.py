"""Application of planned movement to live unit state.

Each step is checked against the mover's position at the time it is
applied, since other units may have moved since planning. Stepping
onto a gate mouth teleports the unit; landing on an occupied tile
nudges it to the nearest free tile.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from turnweave.core.logging import get_logger
from turnweave.engine.gates import GateRegistry
from turnweave.engine.roster import UnitRoster
from turnweave.engine.spatial import are_adjacent, find_nearest_free_tile, occupied_tiles, units_at
from turnweave.models.units import MapPosition, Point, Unit
from turnweave.models.world import Gate, World


logger = get_logger(__name__)


@dataclass
class MovementStepUpdate:
    """Progress notification sent after each applied step."""

    unit_id: str
    step_index: int
    total_steps: int
    map_id: str
    position: Point


MovementStepHandler = Callable[[MovementStepUpdate], None]


class MovementApplier:
    """Moves units one tile at a time, resolving gates and collisions.

    Attributes:
        world: Maps used for bounds and walkability.
        roster: Live units.
        gates: Gate registry consulted on every step.
        step_cooldown_seconds: Pause between steps of a path.
    """

    def __init__(
        self,
        world: World,
        roster: UnitRoster,
        gates: GateRegistry | None = None,
        *,
        step_cooldown_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.world = world
        self.roster = roster
        self.gates = gates or GateRegistry()
        self.step_cooldown_seconds = step_cooldown_seconds
        self._sleep = sleep

    def move_unit_to_position(self, unit_id: str, x: int, y: int) -> bool:
        """Place a unit on a tile of its current map.

        Gates at the tile are followed. If the tile is already occupied,
        the unit is nudged to the nearest free tile.

        Returns:
            False if the tile is out of bounds or holds a gate whose
            destination is not on a known map.

        Raises:
            UnitNotFoundError: If the unit is not in the roster.
            MissingPropertyError: If the unit has no position.
            MapNotFoundError: If the unit's map does not exist.
        """
        unit = self.roster.require(unit_id)
        current = unit.require_position()

        gate = self.gates.get_destination(current.map_id, x, y)
        if gate is not None:
            return self._handle_gate_transition(unit, gate)

        tile_map = self.world.get_map(current.map_id)
        if not tile_map.is_valid_position(x, y):
            logger.error(
                "Target position out of bounds",
                unit=unit.name,
                x=x,
                y=y,
                width=tile_map.width,
                height=tile_map.height,
            )
            return False

        unit.set_position(current.map_id, x, y, current.position.z)

        occupants = units_at(self.roster, current.map_id, x, y)
        if len(occupants) > 1:
            occupied = occupied_tiles(self.roster, exclude_id=unit.id)
            free = find_nearest_free_tile(self.world, current.map_id, occupied, Point(x=x, y=y, z=current.position.z))
            if free is None:
                logger.warning(
                    "No free tile to resolve collision",
                    unit=unit.name,
                    map_id=current.map_id,
                    x=x,
                    y=y,
                )
            else:
                unit.set_position(current.map_id, free.x, free.y, free.z)
                logger.info(
                    "Collision resolved by nudge",
                    unit=unit.name,
                    intended=(x, y),
                    actual=(free.x, free.y),
                )
                self.log_collision_if_any(current.map_id, free.x, free.y)
        return True

    def apply_step(self, unit_id: str, step: MapPosition) -> bool:
        """Apply one planned step against the unit's live position.

        The step fails when it is on a different map than the unit or is
        not adjacent to the unit's tile.
        """
        unit = self.roster.require(unit_id)
        current = unit.require_position()

        if step.map_id != current.map_id:
            logger.warning(
                "Movement step map mismatch",
                unit=unit.name,
                expected=current.map_id,
                got=step.map_id,
            )
            return False

        if step.position.x != current.position.x or step.position.y != current.position.y:
            if not are_adjacent(current.position, step.position):
                logger.warning(
                    "Movement step not adjacent",
                    unit=unit.name,
                    current=(current.position.x, current.position.y),
                    step=(step.position.x, step.position.y),
                )
                return False

        return self.move_unit_to_position(unit_id, step.position.x, step.position.y)

    def apply_movement_path(
        self,
        unit_id: str,
        steps: Sequence[MapPosition],
        on_step: MovementStepHandler | None = None,
    ) -> int:
        """Apply steps in order, stopping at the first that fails.

        Args:
            unit_id: The moving unit.
            steps: Planned steps.
            on_step: Called after each applied step.

        Returns:
            Number of steps applied.
        """
        if not steps:
            return 0

        unit = self.roster.require(unit_id)
        total = len(steps)
        applied = 0
        for index, step in enumerate(steps):
            if index > 0 and self.step_cooldown_seconds > 0:
                self._sleep(self.step_cooldown_seconds)

            if not self.apply_step(unit_id, step):
                logger.warning(
                    "Movement path interrupted",
                    unit=unit.name,
                    applied=applied,
                    total=total,
                )
                break
            applied += 1

            if on_step is not None:
                position = unit.require_position()
                try:
                    on_step(
                        MovementStepUpdate(
                            unit_id=unit_id,
                            step_index=index + 1,
                            total_steps=total,
                            map_id=position.map_id,
                            position=position.position,
                        )
                    )
                except Exception:
                    logger.exception("Movement step handler failed", unit=unit.name)
        return applied

    def log_collision_if_any(self, map_id: str, x: int, y: int) -> None:
        occupants = units_at(self.roster, map_id, x, y)
        if len(occupants) > 1:
            logger.warning(
                "Collision detected",
                map_id=map_id,
                x=x,
                y=y,
                units=[unit.label() for unit in occupants],
            )

    def _handle_gate_transition(self, unit: Unit, gate: Gate) -> bool:
        destination = gate.position_to
        if not self.world.has_map(gate.map_to) or not self.world.get_map(gate.map_to).is_valid_position(
            destination.x, destination.y
        ):
            logger.warning(
                "Gate destination unavailable",
                unit=unit.name,
                gate=gate.name,
                map_to=gate.map_to,
                position=(destination.x, destination.y),
            )
            return False

        unit.set_position(gate.map_to, destination.x, destination.y)
        logger.info(
            "Unit passed through gate",
            unit=unit.name,
            gate=gate.name,
            map_from=gate.map_from,
            map_to=gate.map_to,
            position=(destination.x, destination.y),
        )
        self.log_collision_if_any(gate.map_to, destination.x, destination.y)
        return True


__all__ = [
    "MovementStepUpdate",
    "MovementStepHandler",
    "MovementApplier",
]
