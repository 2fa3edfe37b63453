"""Perception system for agent awareness.

PerceptionComponent decides which other agents a unit can currently see.
It answers "who is visible?" without interpreting threat or making
behavioral decisions. That stays in the utility scoring layer.

Detection is omnidirectional. An agent is perceived when it is alive, not
the perceiver itself, within ``awareness_radius`` (if one is set), and
visible via Bresenham line of sight against the terrain grid.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vanguard.game import ranges

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent


@dataclass(frozen=True, slots=True)
class PerceivedAgent:
    """A single agent detected this turn.

    Attributes:
        agent: The detected agent.
        distance: Chebyshev distance from the perceiver.
        is_enemy: True if the agent belongs to another team.
    """

    agent: Agent
    distance: int
    is_enemy: bool


class PerceptionComponent:
    """Line-of-sight perception shared by every agent on a team.

    Attributes:
        awareness_radius: Maximum detection range in tiles (Chebyshev). None
            means the whole map, limited only by line of sight.
    """

    def __init__(self, awareness_radius: int | None = None) -> None:
        self.awareness_radius = awareness_radius

    def get_perceived_agents(
        self,
        agent: Agent,
        game_map: GameMap,
        candidates: Iterable[Agent],
    ) -> list[PerceivedAgent]:
        """Return every agent ``agent`` can currently see, closest first."""
        perceived: list[PerceivedAgent] = []

        for other in candidates:
            if other is agent or not other.is_alive:
                continue

            distance = ranges.calculate_distance(agent.x, agent.y, other.x, other.y)
            if self.awareness_radius is not None and distance > self.awareness_radius:
                continue

            if not game_map.has_line_of_sight(agent.x, agent.y, other.x, other.y):
                continue

            perceived.append(
                PerceivedAgent(
                    agent=other,
                    distance=distance,
                    is_enemy=other.team_id != agent.team_id,
                )
            )

        # Stable sort: equal distances keep roster order.
        perceived.sort(key=lambda p: p.distance)
        return perceived

    def refresh(
        self, agent: Agent, game_map: GameMap, roster: Iterable[Agent]
    ) -> None:
        """Rebuild ``agent.visible_enemies`` and ``agent.visible_allies``."""
        perceived = self.get_perceived_agents(agent, game_map, roster)
        agent.visible_enemies = [p.agent for p in perceived if p.is_enemy]
        agent.visible_allies = [p.agent for p in perceived if not p.is_enemy]
