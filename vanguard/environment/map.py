"""Battlefield grid: terrain, occupancy and spatial queries.

Every array is indexed ``[x, y]`` with x running across a row and y down the
rows, matching the row-major terrain feed read by ``from_terrain_string``.
Occupancy records which unit stands on a cell. It is informational only:
units never block movement or line of sight, only terrain does.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from vanguard.environment import tile_types
from vanguard.environment.tile_types import TerrainClass, TileTypeID
from vanguard.game import ranges
from vanguard.types import AgentId, TileCoord, WorldTilePos
from vanguard.util import pathfinding
from vanguard.util.pathfinding import UNREACHABLE, PathResult

logger = logging.getLogger(__name__)

# Value stored in the occupant-index grid when no unit stands on a cell.
NO_OCCUPANT = -1


class GameMap:
    """The battlefield grid.

    Terrain and occupancy are stored as numpy arrays indexed ``[x, y]``.
    Units never block movement or sight; only terrain does. Occupancy is
    tracked so callers can ask "who is standing here?" and is rebuilt once
    per turn by the map owner.
    """

    def __init__(
        self,
        width: TileCoord,
        height: TileCoord,
        tiles: np.ndarray | None = None,
    ) -> None:
        self.width: TileCoord = width
        self.height: TileCoord = height

        if tiles is None:
            tiles = np.full(
                (width, height), fill_value=TileTypeID.SPACE, dtype=np.uint8, order="F"
            )
        elif tiles.shape != (width, height):
            raise ValueError(
                f"Tile array shape {tiles.shape} does not match map size "
                f"({width}, {height})"
            )
        self.tiles = tiles

        # Occupancy: index into self._occupant_ids, or NO_OCCUPANT.
        self.occupant = np.full(
            (width, height), fill_value=NO_OCCUPANT, dtype=np.int32, order="F"
        )
        self._occupant_ids: list[AgentId] = []
        self._occupant_index: dict[AgentId, int] = {}

        # Cached property arrays, populated on demand.
        self._walkable_map_cache: np.ndarray | None = None

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> GameMap:
        """Build a map from row-major terrain ids (``rows[y][x]``)."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        if any(len(row) != width for row in rows):
            raise ValueError("All terrain rows must have the same length")
        tiles = np.asarray(rows, dtype=np.uint8).T.copy(order="F")
        return cls(width, height, tiles)

    @classmethod
    def from_terrain_string(cls, data: str, width: int, height: int) -> GameMap:
        """Build a map from the comma-separated terrain feed.

        The feed lists terrain ids row by row (index ``y * width + x``).
        Missing trailing values are filled with open ground.
        """
        values = [int(v) for v in data.strip().split(",") if v.strip()]
        expected = width * height
        if len(values) < expected:
            logger.warning(
                "Terrain feed has %d cells, expected %d; padding with open ground",
                len(values),
                expected,
            )
            values.extend([TileTypeID.SPACE] * (expected - len(values)))
        flat = np.asarray(values[:expected], dtype=np.uint8)
        tiles = flat.reshape((height, width)).T.copy(order="F")
        return cls(width, height, tiles)

    # ------------------------------------------------------------------
    # Terrain
    # ------------------------------------------------------------------

    def invalidate_property_caches(self) -> None:
        """Call this whenever `self.tiles` changes to clear cached property maps."""
        self._walkable_map_cache = None

    @property
    def walkable(self) -> np.ndarray:
        """Boolean array of shape (width, height) where True means tile is walkable."""
        if self._walkable_map_cache is None:
            self._walkable_map_cache = tile_types.get_walkable_map(self.tiles)
        return self._walkable_map_cache

    def is_valid_position(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_obstacle(self, x: int, y: int) -> bool:
        """Return True if the cell blocks movement and sight.

        Out-of-bounds cells count as obstacles.
        """
        if not self.is_valid_position(x, y):
            return True
        return not self.walkable[x, y]

    def terrain_at(self, x: int, y: int) -> TerrainClass:
        if not self.is_valid_position(x, y):
            return TerrainClass.OBSTACLE
        return tile_types.get_terrain_class(int(self.tiles[x, y]))

    def set_tile(self, x: int, y: int, tile_type_id: int) -> bool:
        if not self.is_valid_position(x, y):
            return False
        self.tiles[x, y] = tile_type_id
        self.invalidate_property_caches()
        return True

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def has_unit(self, x: int, y: int) -> bool:
        if not self.is_valid_position(x, y):
            return False
        return bool(self.occupant[x, y] != NO_OCCUPANT)

    def unit_at(self, x: int, y: int) -> AgentId | None:
        if not self.is_valid_position(x, y):
            return None
        index = int(self.occupant[x, y])
        if index == NO_OCCUPANT:
            return None
        return self._occupant_ids[index]

    def set_unit(self, x: int, y: int, unit_id: AgentId) -> bool:
        """Mark a cell as occupied. Obstacles and out-of-bounds cells refuse."""
        if self.is_obstacle(x, y):
            return False
        index = self._occupant_index.get(unit_id)
        if index is None:
            index = len(self._occupant_ids)
            self._occupant_ids.append(unit_id)
            self._occupant_index[unit_id] = index
        self.occupant[x, y] = index
        return True

    def remove_unit(self, x: int, y: int) -> None:
        if not self.is_valid_position(x, y):
            return
        self.occupant[x, y] = NO_OCCUPANT

    def clear_units(self) -> None:
        self.occupant.fill(NO_OCCUPANT)
        self._occupant_ids.clear()
        self._occupant_index.clear()

    # ------------------------------------------------------------------
    # Spatial queries
    # ------------------------------------------------------------------

    def shortest_path(self, x1: int, y1: int, x2: int, y2: int) -> PathResult:
        """Optimal 8-directional path length between two cells.

        Returns ``UNREACHABLE`` for invalid endpoints, an obstacle goal, or
        when no route exists. The start cell is never tested for obstacles.
        """
        if not self.is_valid_position(x1, y1) or not self.is_valid_position(x2, y2):
            return UNREACHABLE
        return pathfinding.shortest_path_length(self.walkable, (x1, y1), (x2, y2))

    def shortest_path_length(self, x1: int, y1: int, x2: int, y2: int) -> PathResult:
        return self.shortest_path(x1, y1, x2, y2)

    def get_real_distance(self, x1: int, y1: int, x2: int, y2: int) -> int:
        """Integer facade over :meth:`shortest_path`: -1 means unreachable."""
        return self.shortest_path(x1, y1, x2, y2).as_int()

    def find_path(
        self, x1: int, y1: int, x2: int, y2: int
    ) -> list[WorldTilePos] | None:
        """Full route between two cells, start included, or None."""
        if not self.is_valid_position(x1, y1) or not self.is_valid_position(x2, y2):
            return None
        return pathfinding.find_path(self.walkable, (x1, y1), (x2, y2))

    def has_line_of_sight(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        if not self.is_valid_position(x1, y1) or not self.is_valid_position(x2, y2):
            return False
        return ranges.has_line_of_sight(self, x1, y1, x2, y2)

    def reachable_positions(
        self, origin: WorldTilePos, movement_range: int
    ) -> set[WorldTilePos]:
        """Cells whose path distance from ``origin`` is in (0, movement_range]."""
        if movement_range <= 0 or not self.is_valid_position(*origin):
            return set()
        dist = pathfinding.flood_distances(self.walkable, origin)
        xs, ys = np.nonzero((dist > 0) & (dist <= movement_range))
        return {(int(x), int(y)) for x, y in zip(xs, ys, strict=True)}
