from __future__ import annotations

from typing import TYPE_CHECKING

import tcod

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap


def has_line_of_sight(
    game_map: GameMap, start_x: int, start_y: int, end_x: int, end_y: int
) -> bool:
    """Check if there's clear line of sight using TCOD"""
    if start_x == end_x and start_y == end_y:
        return True

    # Get line points using optimized Bresenham
    line_points = get_line(start_x, start_y, end_x, end_y)

    # Every point except the start must be clear, the end included: a target
    # standing on an obstacle cell cannot be seen.
    return not any(game_map.is_obstacle(x, y) for x, y in line_points[1:])


def get_line(
    start_x: int, start_y: int, end_x: int, end_y: int
) -> list[tuple[int, int]]:
    """Return Bresenham line points from (start_x, start_y) to (end_x, end_y)."""

    return [
        (int(x), int(y))
        for x, y in tcod.los.bresenham((start_x, start_y), (end_x, end_y))
    ]


def calculate_distance(x1: int, y1: int, x2: int, y2: int) -> int:
    """Calculate Chebyshev distance between two points."""

    # Chebyshev distance matches 8-directional movement: one diagonal step
    # counts as 1, so it is also the obstacle-free path length.
    return max(abs(x2 - x1), abs(y2 - y1))


def euclidean_distance(x1: int, y1: int, x2: int, y2: int) -> float:
    """Straight-line distance, used by soft positional considerations."""
    return ((x2 - x1) ** 2 + (y2 - y1) ** 2) ** 0.5
