"""Distance, adjacency and occupancy primitives over unit positions.

Helpers here read positions but never write them. Neighbor order is
fixed (north, east, south, west, then diagonals clockwise from
north-east) so every search built on top of it is deterministic.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from turnweave.models.units import Point, Unit
from turnweave.models.world import World


CARDINAL_OFFSETS: tuple[tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
DIAGONAL_OFFSETS: tuple[tuple[int, int], ...] = ((1, -1), (1, 1), (-1, 1), (-1, -1))

TileKey = tuple[str, int, int]


@dataclass
class Collision:
    """Two or more units sharing one tile."""

    map_id: str
    x: int
    y: int
    units: list[Unit] = field(default_factory=list)


def manhattan_distance(a: Point, b: Point) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def euclidean_distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def are_adjacent(a: Point, b: Point, *, allow_diagonal: bool = False) -> bool:
    """Check 4-directional (or 8-directional) adjacency."""
    dx, dy = abs(a.x - b.x), abs(a.y - b.y)
    if allow_diagonal:
        return max(dx, dy) == 1
    return dx + dy == 1


def neighbors(x: int, y: int, *, allow_diagonal: bool = False) -> list[tuple[int, int]]:
    offsets = CARDINAL_OFFSETS + DIAGONAL_OFFSETS if allow_diagonal else CARDINAL_OFFSETS
    return [(x + dx, y + dy) for dx, dy in offsets]


def distance_between_units(a: Unit, b: Unit, *, manhattan: bool = True) -> float:
    """Distance between two units' tiles.

    Returns ``math.inf`` when either unit has no position or they stand
    on different maps.
    """
    pos_a, pos_b = a.position, b.position
    if pos_a is None or pos_b is None or pos_a.map_id != pos_b.map_id:
        return math.inf
    if manhattan:
        return manhattan_distance(pos_a.position, pos_b.position)
    return euclidean_distance(pos_a.position, pos_b.position)


def units_at(units: Iterable[Unit], map_id: str, x: int, y: int) -> list[Unit]:
    found = []
    for unit in units:
        position = unit.position
        if position is not None and position.key == (map_id, x, y):
            found.append(unit)
    return found


def occupied_tiles(units: Iterable[Unit], *, exclude_id: str | None = None) -> set[TileKey]:
    """Tiles holding at least one unit, optionally ignoring one unit."""
    tiles = set()
    for unit in units:
        if unit.id == exclude_id:
            continue
        position = unit.position
        if position is not None:
            tiles.add(position.key)
    return tiles


def find_collisions(units: Iterable[Unit]) -> list[Collision]:
    """Group units by tile and return every tile with more than one occupant."""
    by_tile: dict[TileKey, list[Unit]] = {}
    for unit in units:
        position = unit.position
        if position is not None:
            by_tile.setdefault(position.key, []).append(unit)
    return [
        Collision(map_id=key[0], x=key[1], y=key[2], units=group)
        for key, group in by_tile.items()
        if len(group) > 1
    ]


def find_nearest_free_tile(
    world: World,
    map_id: str,
    occupied: set[TileKey],
    origin: Point,
) -> Point | None:
    """Breadth-first ring search for the closest walkable, unoccupied tile.

    The origin itself is never returned. Returns None when the whole map
    is full or unwalkable.
    """
    tile_map = world.get_map(map_id)
    seen = {(origin.x, origin.y)}
    queue: deque[tuple[int, int]] = deque([(origin.x, origin.y)])
    while queue:
        x, y = queue.popleft()
        for nx, ny in neighbors(x, y):
            if (nx, ny) in seen or not tile_map.is_valid_position(nx, ny):
                continue
            seen.add((nx, ny))
            if tile_map.is_walkable(nx, ny) and (map_id, nx, ny) not in occupied:
                return Point(x=nx, y=ny, z=origin.z)
            queue.append((nx, ny))
    return None


__all__ = [
    "CARDINAL_OFFSETS",
    "DIAGONAL_OFFSETS",
    "TileKey",
    "Collision",
    "manhattan_distance",
    "euclidean_distance",
    "are_adjacent",
    "neighbors",
    "distance_between_units",
    "units_at",
    "occupied_tiles",
    "find_collisions",
    "find_nearest_free_tile",
]
