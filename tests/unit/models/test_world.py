"""Tests for maps, gates and the world container."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from turnweave.core.exceptions import MapNotFoundError, ValidationError
from turnweave.models import Gate, Point, TerrainType, TileMap, World


class TestTileMap:
    """Tests for TileMap."""

    def test_default_terrain_is_plains(self) -> None:
        """Test maps without terrain are filled with plains."""
        tile_map = TileMap(name="main", width=3, height=2)

        assert len(tile_map.terrain) == 2
        assert all(len(row) == 3 for row in tile_map.terrain)
        assert tile_map.get_terrain(2, 1) == TerrainType.PLAINS

    def test_terrain_shape_checked(self) -> None:
        """Test mismatched terrain grids are rejected."""
        with pytest.raises((ValidationError, PydanticValidationError)):
            TileMap(name="bad", width=2, height=2, terrain=[[TerrainType.PLAINS] * 2])

    def test_dimensions_must_be_positive(self) -> None:
        """Test zero-sized maps are rejected."""
        with pytest.raises(PydanticValidationError):
            TileMap(name="bad", width=0, height=3)

    @pytest.mark.parametrize(
        "x,y,valid",
        [(0, 0, True), (2, 1, True), (3, 0, False), (0, 2, False), (-1, 0, False)],
    )
    def test_is_valid_position(self, x: int, y: int, valid: bool) -> None:
        """Test bounds checking."""
        tile_map = TileMap(name="main", width=3, height=2)
        assert tile_map.is_valid_position(x, y) is valid

    @pytest.mark.parametrize(
        "terrain,walkable",
        [
            (TerrainType.PLAINS, True),
            (TerrainType.FOREST, True),
            (TerrainType.WATER, False),
            (TerrainType.MOUNTAIN, False),
            (TerrainType.WALL, False),
        ],
    )
    def test_walkability_from_terrain(self, terrain: TerrainType, walkable: bool) -> None:
        """Test blocking terrain types."""
        tile_map = TileMap(name="main", width=2, height=2)
        assert tile_map.set_terrain(1, 1, terrain) is True
        assert tile_map.is_walkable(1, 1) is walkable

    def test_out_of_bounds_not_walkable(self) -> None:
        """Test tiles off the map are never walkable."""
        tile_map = TileMap(name="main", width=2, height=2)
        assert tile_map.is_walkable(5, 5) is False
        assert tile_map.set_terrain(5, 5, TerrainType.WALL) is False


class TestWorld:
    """Tests for World."""

    def test_get_map(self, world: World) -> None:
        """Test map lookup by id."""
        assert world.has_map("main")
        assert world.get_map("main").width == 10

    def test_missing_map(self, world: World) -> None:
        """Test unknown maps raise MapNotFoundError."""
        with pytest.raises(MapNotFoundError) as exc_info:
            world.get_map("nowhere")
        assert exc_info.value.details["map_id"] == "nowhere"

    def test_round_trip(self, world: World) -> None:
        """Test a world reloads from its JSON dump."""
        world.get_map("main").set_terrain(3, 3, TerrainType.WATER)

        restored = World.model_validate_json(world.model_dump_json())

        assert restored.get_map("main").is_walkable(3, 3) is False
        assert len(restored.get_all_maps()) == 1


class TestGate:
    """Tests for Gate."""

    def test_name_required(self) -> None:
        """Test empty gate names are rejected."""
        with pytest.raises(PydanticValidationError):
            Gate(
                name="",
                map_from="a",
                position_from=Point(x=0, y=0),
                map_to="b",
                position_to=Point(x=1, y=1),
            )

    def test_defaults_to_one_way(self) -> None:
        """Test gates are one-way unless flagged."""
        gate = Gate(
            name="portal",
            map_from="a",
            position_from=Point(x=0, y=0),
            map_to="b",
            position_to=Point(x=1, y=1),
        )
        assert gate.bidirectional is False
