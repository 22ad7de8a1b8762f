"""Tile maps, gates and the world container.

Maps store terrain row-major (``terrain[y][x]``). A map built without
terrain is filled with plains. Walkability is derived from terrain:
water, mountains and walls block movement.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from turnweave.core.exceptions import MapNotFoundError, ValidationError
from turnweave.models.enums import TerrainType
from turnweave.models.units import Point


class Gate(BaseModel):
    """A named teleport link from a tile on one map to a tile on another.

    Attributes:
        name: Unique gate name.
        map_from: Source map id.
        position_from: Gate mouth on the source map.
        map_to: Destination map id.
        position_to: Arrival tile on the destination map.
        bidirectional: Whether a reverse link should be registered.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    map_from: str
    position_from: Point
    map_to: str
    position_to: Point
    bidirectional: bool = False


class TileMap(BaseModel):
    """A rectangular grid of terrain tiles.

    Attributes:
        name: Map id, unique within a world.
        width: Number of columns.
        height: Number of rows.
        terrain: Row-major terrain grid.
    """

    name: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    terrain: list[list[TerrainType]] = Field(default_factory=list)

    @model_validator(mode="after")
    def fill_terrain(self) -> Self:
        """Fill missing terrain with plains and check the grid shape.

        Raises:
            ValidationError: If the supplied grid does not match width/height.
        """
        if not self.terrain:
            self.terrain = [[TerrainType.PLAINS] * self.width for _ in range(self.height)]
            return self
        if len(self.terrain) != self.height or any(len(row) != self.width for row in self.terrain):
            raise ValidationError(
                f"Terrain grid of map {self.name} does not match {self.width}x{self.height}",
                field_name="terrain",
            )
        return self

    def is_valid_position(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_terrain(self, x: int, y: int) -> TerrainType | None:
        if not self.is_valid_position(x, y):
            return None
        return self.terrain[y][x]

    def set_terrain(self, x: int, y: int, terrain: TerrainType) -> bool:
        """Set a tile's terrain. Returns False when out of bounds."""
        if not self.is_valid_position(x, y):
            return False
        self.terrain[y][x] = terrain
        return True

    def is_walkable(self, x: int, y: int) -> bool:
        terrain = self.get_terrain(x, y)
        return terrain is not None and terrain.is_walkable


class World(BaseModel):
    """Container of named maps."""

    maps: dict[str, TileMap] = Field(default_factory=dict)

    def add_map(self, tile_map: TileMap) -> None:
        self.maps[tile_map.name] = tile_map

    def has_map(self, map_id: str) -> bool:
        return map_id in self.maps

    def get_map(self, map_id: str) -> TileMap:
        """Return a map by id.

        Raises:
            MapNotFoundError: If no map has that id.
        """
        tile_map = self.maps.get(map_id)
        if tile_map is None:
            raise MapNotFoundError(f"Map '{map_id}' not found", map_id=map_id)
        return tile_map

    def get_all_maps(self) -> list[TileMap]:
        return list(self.maps.values())


__all__ = [
    "Gate",
    "TileMap",
    "World",
]
