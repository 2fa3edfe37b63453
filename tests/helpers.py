from __future__ import annotations

from collections.abc import Sequence

from vanguard.environment.map import GameMap
from vanguard.environment.tile_types import TileTypeID
from vanguard.game.agent import Agent
from vanguard.game.blackboard import TeamBlackboard
from vanguard.types import WorldTilePos

O = TileTypeID.SPACE
X = TileTypeID.MOUNT


def make_open_map(width: int = 10, height: int = 10) -> GameMap:
    """An obstacle-free map."""
    return GameMap(width, height)


def make_map(rows: Sequence[str]) -> GameMap:
    """Build a map from ASCII rows: ``.`` is open ground, ``#`` is mountain.

    Rows are listed top to bottom, so ``rows[y][x]``.
    """
    return GameMap.from_rows([[X if ch == "#" else O for ch in row] for row in rows])


def make_wall_map() -> GameMap:
    """5x5 map with a mountain wall at x=1 for y=1..3."""
    return make_map(
        [
            ".....",
            ".#...",
            ".#...",
            ".#...",
            ".....",
        ]
    )


def make_agent(
    agent_id: str = "a1",
    team_id: str = "red",
    position: WorldTilePos = (0, 0),
    blackboard: TeamBlackboard | None = None,
    **kwargs,
) -> Agent:
    return Agent(
        agent_id,
        team_id,
        position,
        blackboard if blackboard is not None else TeamBlackboard(team_id),
        **kwargs,
    )


def make_duel(
    game_map: GameMap | None = None,
    hero_pos: WorldTilePos = (2, 2),
    enemy_pos: WorldTilePos = (3, 2),
    **hero_kwargs,
) -> tuple[GameMap, Agent, Agent]:
    """One hero and one enemy on an open map, enemy visible to the hero."""
    game_map = game_map or make_open_map()
    hero = make_agent("hero", "red", hero_pos, **hero_kwargs)
    enemy = make_agent("enemy", "blue", enemy_pos)
    hero.visible_enemies = [enemy]
    enemy.visible_enemies = [hero]
    return game_map, hero, enemy
