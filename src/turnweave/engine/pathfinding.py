"""Movement planning over a snapshot of unit positions.

The planner runs a breadth-first search from the mover's tile over
walkable tiles that no other unit occupies, stopping at the nearest
tile within action range of the target. Neighbors are always visited
north, east, south, west, so identical inputs give identical plans.

Gate mouths are traversable: stepping onto one continues the search
from the gate's destination tile, possibly on another map. The plan
records the mouth tile, which is what the applier is asked to step on.

Planning never mutates units. Occupancy is copied into a frozen set
before the search starts.
"""

from __future__ import annotations

import math
import random
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from turnweave.core.exceptions import NoGoalPositionsError, NoPathError
from turnweave.core.logging import get_logger
from turnweave.engine.gates import GateRegistry
from turnweave.engine.spatial import TileKey, distance_between_units, neighbors, occupied_tiles
from turnweave.models.units import MapPosition, Unit, is_number
from turnweave.models.world import World


logger = get_logger(__name__)


@dataclass
class MovementPlan:
    """Ordered steps for one unit.

    Attributes:
        steps: Tiles to step on, each 4-adjacent to the previous one (or
            to the destination of the gate the previous step entered).
        moved_towards_target: True when the steps approach a target.
    """

    steps: list[MapPosition] = field(default_factory=list)
    moved_towards_target: bool = False

    def __len__(self) -> int:
        return len(self.steps)


class MovementPlanner:
    """Plans bounded step sequences toward targets or exploration tiles.

    Attributes:
        world: Maps searched by the planner.
        gates: Gate registry consulted for inter-map links.
    """

    def __init__(
        self,
        world: World,
        gates: GateRegistry | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.gates = gates or GateRegistry()
        self._rng = rng or random.Random()

    @staticmethod
    def get_movement_range(unit: Unit) -> int:
        """The unit's ``movementRange``, floored at 0; missing means 0."""
        value = unit.get_property_value("movementRange")
        if not is_number(value) or not math.isfinite(value):
            return 0
        return max(0, math.floor(value))

    def plan_movement_toward_target(
        self,
        mover: Unit,
        target: Unit,
        units: Sequence[Unit],
        action_range: int | float,
    ) -> MovementPlan:
        """Plan up to ``movementRange`` steps toward a tile in range of ``target``.

        Args:
            mover: The unit that will move.
            target: The unit to approach.
            units: Every unit in play, used for occupancy.
            action_range: Manhattan range the mover needs to reach the target.

        Returns:
            The plan; empty when the mover cannot move or is already in range.

        Raises:
            MissingPropertyError: If either unit has no position.
            NoGoalPositionsError: If no free walkable tile is within range.
            NoPathError: If no goal tile can be reached.
        """
        movement_range = self.get_movement_range(mover)
        if movement_range == 0:
            return MovementPlan()

        start = mover.require_position()
        target_position = target.require_position()

        distance = distance_between_units(mover, target)
        if distance <= action_range:
            logger.debug(
                "Target already in range",
                unit=mover.name,
                target=target.name,
                distance=distance,
                action_range=action_range,
            )
            return MovementPlan()

        occupied = frozenset(occupied_tiles(units, exclude_id=mover.id))
        goals = self._goal_tiles(target_position, action_range, occupied)
        if not goals:
            raise NoGoalPositionsError(
                "No available goal positions",
                unit_id=mover.id,
                map_id=target_position.map_id,
            )

        path = self._search(start, occupied, goals.__contains__)
        if path is None:
            raise NoPathError("No path found", unit_id=mover.id, map_id=start.map_id)

        steps = path[:movement_range]
        if steps:
            logger.debug(
                "Planned move",
                unit=mover.name,
                target=target.name,
                first_step=(steps[0].position.x, steps[0].position.y),
                steps=len(steps),
                path_length=len(path),
            )
        return MovementPlan(steps=steps, moved_towards_target=bool(steps))

    def plan_explore_movement(self, mover: Unit, units: Sequence[Unit]) -> MovementPlan:
        """Plan a path to a random tile reachable within ``movementRange``.

        Returns:
            The plan; empty when the mover cannot move or nothing is reachable.

        Raises:
            MissingPropertyError: If the mover has no position.
        """
        movement_range = self.get_movement_range(mover)
        if movement_range == 0:
            return MovementPlan()

        start = mover.require_position()
        occupied = frozenset(occupied_tiles(units, exclude_id=mover.id))

        came_from = self._explore(start, occupied, max_depth=movement_range)
        reachable = [key for key in came_from if key != start.key]
        if not reachable:
            logger.info("No exploration target", unit=mover.name)
            return MovementPlan()

        destination = self._rng.choice(reachable)
        return MovementPlan(steps=self._reconstruct(came_from, destination))

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def _goal_tiles(
        self,
        target: MapPosition,
        action_range: int | float,
        occupied: frozenset[TileKey],
    ) -> set[TileKey]:
        tile_map = self.world.get_map(target.map_id)
        reach = max(0, math.floor(action_range))
        tx, ty = target.position.x, target.position.y
        goals = set()
        for y in range(max(0, ty - reach), min(tile_map.height - 1, ty + reach) + 1):
            for x in range(max(0, tx - reach), min(tile_map.width - 1, tx + reach) + 1):
                if abs(x - tx) + abs(y - ty) > reach:
                    continue
                key = (target.map_id, x, y)
                if tile_map.is_walkable(x, y) and key not in occupied:
                    goals.add(key)
        return goals

    def _expand(
        self,
        current: TileKey,
        occupied: frozenset[TileKey],
    ) -> list[tuple[TileKey, MapPosition]]:
        """Reachable (landing tile, step) pairs from ``current`` in visiting order."""
        map_id, x, y = current
        tile_map = self.world.get_map(map_id)
        moves = []
        for nx, ny in neighbors(x, y):
            if not tile_map.is_walkable(nx, ny) or (map_id, nx, ny) in occupied:
                continue
            landing: TileKey = (map_id, nx, ny)
            gate = self.gates.get_destination(map_id, nx, ny)
            if gate is not None:
                if not self.world.has_map(gate.map_to) or not self.world.get_map(gate.map_to).is_valid_position(
                    gate.position_to.x, gate.position_to.y
                ):
                    continue
                landing = (gate.map_to, gate.position_to.x, gate.position_to.y)
            moves.append((landing, MapPosition.at(map_id, nx, ny)))
        return moves

    def _search(
        self,
        start: MapPosition,
        occupied: frozenset[TileKey],
        is_goal: Callable[[TileKey], bool],
    ) -> list[MapPosition] | None:
        came_from: dict[TileKey, tuple[TileKey, MapPosition] | None] = {start.key: None}
        queue: deque[TileKey] = deque([start.key])
        while queue:
            current = queue.popleft()
            for landing, step in self._expand(current, occupied):
                if landing in came_from:
                    continue
                came_from[landing] = (current, step)
                if is_goal(landing):
                    return self._reconstruct(came_from, landing)
                queue.append(landing)
        return None

    def _explore(
        self,
        start: MapPosition,
        occupied: frozenset[TileKey],
        *,
        max_depth: int,
    ) -> dict[TileKey, tuple[TileKey, MapPosition] | None]:
        came_from: dict[TileKey, tuple[TileKey, MapPosition] | None] = {start.key: None}
        depth = {start.key: 0}
        queue: deque[TileKey] = deque([start.key])
        while queue:
            current = queue.popleft()
            if depth[current] >= max_depth:
                continue
            for landing, step in self._expand(current, occupied):
                if landing in came_from:
                    continue
                came_from[landing] = (current, step)
                depth[landing] = depth[current] + 1
                queue.append(landing)
        return came_from

    @staticmethod
    def _reconstruct(
        came_from: dict[TileKey, tuple[TileKey, MapPosition] | None],
        end: TileKey,
    ) -> list[MapPosition]:
        steps = []
        link = came_from[end]
        while link is not None:
            previous, step = link
            steps.append(step)
            link = came_from[previous]
        steps.reverse()
        return steps


__all__ = [
    "MovementPlan",
    "MovementPlanner",
]
