"""Obstacle-aware shortest-path search on the battlefield grid.

Movement is 8-directional and every step (cardinal or diagonal) costs 1, so
Chebyshev distance is an exact lower bound on the remaining cost. Searches
run on tcod's pathfinders over an int8 cost array built from the map's
walkable grid.

Results are returned as a tagged :class:`PathResult` rather than a bare
integer so "zero distance" and "unreachable" cannot be confused.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import tcod

from vanguard.types import WorldTilePos


@dataclass(frozen=True, slots=True)
class PathResult:
    """Outcome of a shortest-path query.

    Attributes:
        length: Number of steps on the optimal route (node count - 1), or
            ``None`` when the goal cannot be reached.
    """

    length: int | None

    @property
    def reachable(self) -> bool:
        return self.length is not None

    def as_int(self) -> int:
        """Return the length, or -1 for unreachable.

        The -1 sentinel exists for callers that store distances in plain int
        fields. Any such caller must treat -1 as "disqualify this candidate",
        never as a numeric distance.
        """
        return self.length if self.length is not None else -1

    def __bool__(self) -> bool:
        return self.reachable


def Reachable(length: int) -> PathResult:  # noqa: N802 - reads as a variant tag
    """Build a reachable result of the given length."""
    return PathResult(length)


UNREACHABLE = PathResult(None)


def chebyshev(x1: int, y1: int, x2: int, y2: int) -> int:
    """Chebyshev distance: max(|dx|, |dy|)."""
    return max(abs(x2 - x1), abs(y2 - y1))


def _cost_from_walkable(walkable: np.ndarray, start: WorldTilePos) -> np.ndarray:
    cost = np.array(walkable, dtype=np.int8)
    # The start cell is never tested, so a unit can always path out of it.
    cost[start] = 1
    return cost


def _is_blocked(walkable: np.ndarray, pos: WorldTilePos) -> bool:
    x, y = pos
    width, height = walkable.shape
    if not (0 <= x < width and 0 <= y < height):
        return True
    return not walkable[x, y]


def _resolve(
    walkable: np.ndarray, start: WorldTilePos, goal: WorldTilePos
) -> tcod.path.Pathfinder | None:
    """Run A* from start to goal. Returns None if the goal is unreachable.

    ``SimpleGraph`` with unit cardinal and diagonal costs derives its A*
    heuristic from those same costs, which on this grid is the Chebyshev
    distance.
    """
    graph = tcod.path.SimpleGraph(
        cost=_cost_from_walkable(walkable, start), cardinal=1, diagonal=1
    )
    pathfinder = tcod.path.Pathfinder(graph)
    pathfinder.add_root(start)
    pathfinder.resolve(goal)

    distance = pathfinder.distance
    if distance[goal] == np.iinfo(distance.dtype).max:
        return None
    return pathfinder


def find_path(
    walkable: np.ndarray,
    start: WorldTilePos,
    goal: WorldTilePos,
) -> list[WorldTilePos] | None:
    """Return the optimal route from start to goal, both endpoints included.

    Args:
        walkable: Boolean array indexed ``[x, y]``; False cells block.
        start: Starting cell. It is never tested against ``walkable``.
        goal: Target cell. An obstacle goal is unreachable.

    Returns:
        A list of positions beginning with ``start`` and ending with ``goal``
        (``[start]`` when they coincide), or ``None`` if no route exists.
    """
    if start == goal:
        return [start]
    if _is_blocked(walkable, goal):
        return None

    pathfinder = _resolve(walkable, start, goal)
    if pathfinder is None:
        return None
    return [(int(x), int(y)) for x, y in pathfinder.path_to(goal).tolist()]


def shortest_path_length(
    walkable: np.ndarray,
    start: WorldTilePos,
    goal: WorldTilePos,
) -> PathResult:
    """Return the optimal path length as a tagged result."""
    if start == goal:
        return Reachable(0)
    if _is_blocked(walkable, goal):
        return UNREACHABLE

    pathfinder = _resolve(walkable, start, goal)
    if pathfinder is None:
        return UNREACHABLE
    return Reachable(int(pathfinder.distance[goal]))


def flood_distances(walkable: np.ndarray, origin: WorldTilePos) -> np.ndarray:
    """Path distance from ``origin`` to every cell, as an int32 array.

    Cells that cannot be reached hold ``np.iinfo(np.int32).max``. The origin
    holds 0. With unit step costs these are the same lengths
    :func:`shortest_path_length` reports.
    """
    cost = _cost_from_walkable(walkable, origin)
    dist = tcod.path.maxarray(cost.shape, dtype=np.int32)
    dist[origin] = 0
    tcod.path.dijkstra2d(dist, cost, cardinal=1, diagonal=1, out=dist)
    return dist
