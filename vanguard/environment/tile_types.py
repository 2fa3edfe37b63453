"""Terrain tile types and their per-type properties.

Tile ids match the values used by the game-state feed, so a terrain grid
received from the server can be stored without translation. Per-type
properties live in small numpy lookup tables indexed by tile id, which lets
a whole map be converted to a walkability mask in one vectorized step.
"""

from __future__ import annotations

from enum import Enum, IntEnum

import numpy as np


class TileTypeID(IntEnum):
    """Terrain ids as sent by the game-state feed."""

    SPACE = 0  # Open ground
    MOUNT = 1  # Mountain (obstacle)
    WATER = 2  # Water (obstacle)
    FLAG = 3  # Capturable stronghold
    CITY = 4  # Neutral city, generic marker
    BASE = 5  # Team spawn base
    SMALL_CITY = 50
    MIDDLE_CITY = 51
    BIG_CITY = 52


class TerrainClass(Enum):
    """Coarse terrain classification consumed by considerations."""

    OPEN = "open"
    OBSTACLE = "obstacle"
    SPECIAL = "special"


_TILE_TYPE_NAMES: dict[TileTypeID, str] = {
    TileTypeID.SPACE: "space",
    TileTypeID.MOUNT: "mountain",
    TileTypeID.WATER: "water",
    TileTypeID.FLAG: "flag",
    TileTypeID.CITY: "city",
    TileTypeID.BASE: "base",
    TileTypeID.SMALL_CITY: "small city",
    TileTypeID.MIDDLE_CITY: "middle city",
    TileTypeID.BIG_CITY: "big city",
}

_OBSTACLE_TILES = frozenset({TileTypeID.MOUNT, TileTypeID.WATER})

# Lookup tables sized to cover every uint8 id. Unknown ids are treated as
# impassable so a malformed feed can never open a route through a wall.
_TABLE_SIZE = 256
_tile_type_properties_known = np.zeros(_TABLE_SIZE, dtype=np.bool_)
_tile_type_properties_walkable = np.zeros(_TABLE_SIZE, dtype=np.bool_)
for _tile_id in TileTypeID:
    _tile_type_properties_known[_tile_id] = True
    _tile_type_properties_walkable[_tile_id] = _tile_id not in _OBSTACLE_TILES


def get_walkable_map(tile_type_ids_map: np.ndarray) -> np.ndarray:
    """
    Converts a map of TileTypeIDs into a boolean map of walkability.
    True means the tile at that position is walkable.
    """
    return _tile_type_properties_walkable[tile_type_ids_map]


def is_walkable_tile(tile_type_id: int) -> bool:
    """Return True if the given tile id can be stood on."""
    if not 0 <= tile_type_id < _TABLE_SIZE:
        return False
    return bool(_tile_type_properties_walkable[tile_type_id])


def is_known_tile(tile_type_id: int) -> bool:
    return 0 <= tile_type_id < _TABLE_SIZE and bool(
        _tile_type_properties_known[tile_type_id]
    )


def get_terrain_class(tile_type_id: int) -> TerrainClass:
    """Classify a tile id as open ground, an obstacle, or a special site."""
    if not is_walkable_tile(tile_type_id):
        return TerrainClass.OBSTACLE
    if tile_type_id == TileTypeID.SPACE:
        return TerrainClass.OPEN
    return TerrainClass.SPECIAL


def get_tile_type_name_by_id(tile_type_id: int) -> str:
    """Return a human-readable name for the tile id, or "unknown"."""
    if not is_known_tile(tile_type_id):
        return "unknown"
    return _TILE_TYPE_NAMES[TileTypeID(tile_type_id)]
