"""Building and refreshing world state from game-server snapshots.

Two payloads are handled, both already decoded from JSON into plain dicts:

Map payload (sent once at game start)::

    {"data": "0,0,1,2,...", "maxX": 14, "maxY": 14}

``maxX`` / ``maxY`` are the largest coordinates, so the map is
``(maxX + 1) x (maxY + 1)`` tiles. ``data`` lists terrain ids row by row.

State payload (sent every round)::

    {
        "round": 12,
        "players": [
            {
                "playerId": 1,
                "roles": [
                    {
                        "roleId": 40,
                        "position": {"x": 3, "y": 4},
                        "life": 80,
                        "maxLife": 100,
                        "mana": 50,
                        "reviveRound": 0,
                        "skills": [{"skillId": "HealSelf", "cdRemainRound": 1}],
                    },
                ],
            },
        ],
    }

Roles without a position or with a non-zero ``reviveRound`` are off the
field and are neither placed on the map nor built as agents.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeAlias

from vanguard import config
from vanguard.environment.map import GameMap
from vanguard.game.agent import Agent
from vanguard.game.blackboard import TeamBlackboard
from vanguard.types import AgentId, TeamId, WorldTilePos

logger = logging.getLogger(__name__)

Snapshot: TypeAlias = Mapping[str, Any]


class SnapshotError(ValueError):
    """Raised when a snapshot is missing required fields."""


def map_from_snapshot(map_data: Snapshot) -> GameMap:
    try:
        data = map_data["data"]
        width = int(map_data["maxX"]) + 1
        height = int(map_data["maxY"]) + 1
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed map payload: {e}") from e
    game_map = GameMap.from_terrain_string(str(data), width, height)
    logger.info("Map loaded: %dx%d", width, height)
    return game_map


def _role_position(role: Snapshot) -> WorldTilePos | None:
    position = role.get("position")
    if not position or role.get("reviveRound", 0) != 0:
        return None
    return (int(position["x"]), int(position["y"]))


def _iter_roles(snapshot: Snapshot) -> Iterator[tuple[TeamId, Snapshot]]:
    for player in snapshot.get("players", []):
        if "playerId" not in player:
            raise SnapshotError("Player entry without playerId")
        team_id = TeamId(str(player["playerId"]))
        for role in player.get("roles", []):
            if "roleId" not in role:
                raise SnapshotError("Role entry without roleId")
            yield team_id, role


def apply_snapshot(game_map: GameMap, snapshot: Snapshot) -> int:
    """Rebuild map occupancy from a state payload and return its round."""
    game_map.clear_units()
    placed = 0
    for _team_id, role in _iter_roles(snapshot):
        position = _role_position(role)
        if position is None:
            continue
        agent_id = AgentId(str(role["roleId"]))
        if game_map.set_unit(*position, agent_id):
            placed += 1
        else:
            logger.warning("Role %s reported on blocked tile %s", agent_id, position)
    round_number = int(snapshot.get("round", 0))
    logger.debug("Round %d snapshot applied: %d units placed", round_number, placed)
    return round_number


def agents_from_snapshot(
    snapshot: Snapshot,
    blackboard_for: Callable[[TeamId], TeamBlackboard],
    movement_range: int = config.DEFAULT_MOVEMENT_RANGE,
) -> list[Agent]:
    """Build one Agent per on-field role, sharing a blackboard per team."""
    round_number = int(snapshot.get("round", 0))
    agents: list[Agent] = []
    for team_id, role in _iter_roles(snapshot):
        position = _role_position(role)
        if position is None:
            continue
        max_health = int(role.get("maxLife", config.DEFAULT_MAX_HEALTH))
        agent = Agent(
            str(role["roleId"]),
            team_id,
            position,
            blackboard_for(team_id),
            health=int(role.get("life", max_health)),
            max_health=max_health,
            mana=int(role.get("mana", config.DEFAULT_MAX_MANA)),
            movement_range=movement_range,
        )
        for skill in role.get("skills", []):
            remaining = int(skill.get("cdRemainRound", 0))
            if remaining > 0:
                agent.cooldowns[str(skill["skillId"])] = remaining
        agent.current_turn = round_number
        agents.append(agent)
    return agents
