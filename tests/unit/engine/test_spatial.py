"""Tests for distance, adjacency and occupancy helpers."""

from __future__ import annotations

import math
from collections.abc import Callable

from turnweave.engine.spatial import (
    are_adjacent,
    distance_between_units,
    euclidean_distance,
    find_collisions,
    find_nearest_free_tile,
    manhattan_distance,
    neighbors,
    occupied_tiles,
    units_at,
)
from turnweave.models import Point, TerrainType, TileMap, Unit, World


class TestDistances:
    """Tests for distance helpers."""

    def test_manhattan(self) -> None:
        assert manhattan_distance(Point(x=0, y=0), Point(x=3, y=4)) == 7

    def test_euclidean(self) -> None:
        assert euclidean_distance(Point(x=0, y=0), Point(x=3, y=4)) == 5.0

    def test_adjacency(self) -> None:
        """Test cardinal and diagonal adjacency."""
        assert are_adjacent(Point(x=1, y=1), Point(x=1, y=2))
        assert not are_adjacent(Point(x=1, y=1), Point(x=2, y=2))
        assert are_adjacent(Point(x=1, y=1), Point(x=2, y=2), allow_diagonal=True)

    def test_neighbor_order(self) -> None:
        """Test neighbors come north, east, south, west."""
        assert neighbors(5, 5) == [(5, 4), (6, 5), (5, 6), (4, 5)]
        assert len(neighbors(5, 5, allow_diagonal=True)) == 8

    def test_unit_distance(self, warrior: Unit, archer: Unit) -> None:
        """Test distance between placed units."""
        assert distance_between_units(warrior, archer) == 5

    def test_unit_distance_other_map(self, warrior: Unit, make_unit: Callable[..., Unit]) -> None:
        """Test units on different maps are infinitely far apart."""
        elsewhere = make_unit("Scout", 0, 0, map_id="cave")
        unplaced = make_unit("Ghost", map_id=None)

        assert math.isinf(distance_between_units(warrior, elsewhere))
        assert math.isinf(distance_between_units(warrior, unplaced))


class TestOccupancy:
    """Tests for occupancy queries."""

    def test_units_at_and_occupied(self, warrior: Unit, archer: Unit) -> None:
        """Test tile lookups."""
        assert units_at([warrior, archer], "main", 5, 0) == [archer]
        assert occupied_tiles([warrior, archer], exclude_id="warrior") == {("main", 5, 0)}

    def test_find_collisions(self, make_unit: Callable[..., Unit]) -> None:
        """Test units sharing a tile are grouped."""
        a = make_unit("A", 2, 2)
        b = make_unit("B", 2, 2)
        c = make_unit("C", 3, 3)

        collisions = find_collisions([a, b, c])

        assert len(collisions) == 1
        assert (collisions[0].map_id, collisions[0].x, collisions[0].y) == ("main", 2, 2)
        assert collisions[0].units == [a, b]


class TestFindNearestFreeTile:
    """Tests for the free tile search."""

    def test_first_free_neighbor(self, world: World) -> None:
        """Test the first free tile in neighbor order is chosen."""
        occupied = {("main", 0, 0)}
        assert find_nearest_free_tile(world, "main", occupied, Point(x=0, y=0)) == Point(x=1, y=0)

    def test_skips_blocked_tiles(self) -> None:
        """Test walls and occupied tiles are skipped."""
        tile_map = TileMap(name="main", width=3, height=1)
        tile_map.set_terrain(1, 0, TerrainType.WALL)
        world = World()
        world.add_map(tile_map)

        assert find_nearest_free_tile(world, "main", set(), Point(x=0, y=0)) == Point(x=2, y=0)
        assert find_nearest_free_tile(world, "main", {("main", 2, 0)}, Point(x=0, y=0)) is None
