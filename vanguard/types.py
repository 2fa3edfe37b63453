from __future__ import annotations

from typing import Literal, NewType, TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

TileCoord: TypeAlias = int  # Always integer tile position

# World coordinates - absolute positions on the battlefield grid
WorldTileCoord: TypeAlias = TileCoord  # Example: x=5, y=3
WorldTilePos: TypeAlias = tuple[
    WorldTileCoord, WorldTileCoord
]  # Example: (5, 3) = tile 5,3 on map

# Directions - discrete grid steps
UnitStep: TypeAlias = Literal[-1, 0, 1]
Direction: TypeAlias = tuple[UnitStep, UnitStep]  # Example: (-1, 0) = westward step

# The eight neighbor offsets in search expansion order. The order is part of
# pathfinding determinism: ties are broken by insertion order.
DIRECTIONS: tuple[Direction, ...] = (
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)

# =============================================================================
# GAME-RELATED TYPES
# =============================================================================

# Unique identifier for an agent. Used as keys on the team blackboard, in
# occupancy grids, and as the focus-target reference.
AgentId = NewType("AgentId", str)

# Identifier for a team. Agents sharing a team id share a blackboard.
TeamId = NewType("TeamId", str)

# Skill identifiers (e.g., "HealSelf", "ArmorBreak").
SkillId: TypeAlias = str

# Debuff identifiers recorded on the blackboard (e.g., "ArmorBroken").
DebuffType: TypeAlias = str

# Game turn counter, starting at 1 for the first turn.
TurnNumber: TypeAlias = int
