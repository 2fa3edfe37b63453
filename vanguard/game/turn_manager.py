"""
Runs rounds of play for a roster of agents on a shared map.

Each call to `run_turn()` is one full round:

1. The turn counter advances and every agent ticks its cooldowns.
2. Map occupancy is rebuilt from agent positions.
3. On focus turns, each team's blackboard gets a fresh focus target.
4. Live agents act one at a time in roster order through their
   DecisionControllers. Agents are strictly sequential, so a debuff or
   focus change written by one agent is visible to the next.

The round stops early once only one team has live agents left.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from vanguard import config
from vanguard.events import MessageEvent, publish_event
from vanguard.game.ai import default_actions
from vanguard.game.ai.controller import DecisionController, TurnResult
from vanguard.game.ai.perception import PerceptionComponent
from vanguard.game.blackboard import TeamBlackboard
from vanguard.types import AgentId, TeamId, TurnNumber

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent
    from vanguard.game.ai.utility import UtilityAction

logger = logging.getLogger(__name__)


class TurnManager:
    """Owns the roster, one blackboard per team, and the round loop."""

    def __init__(
        self,
        game_map: GameMap,
        focus_interval: int = 2,
        perception: PerceptionComponent | None = None,
    ) -> None:
        self.game_map = game_map
        self.focus_interval = focus_interval
        self.perception = perception or PerceptionComponent()
        self.turn: TurnNumber = 0
        self.agents: list[Agent] = []
        self.controllers: dict[AgentId, DecisionController] = {}
        self.blackboards: dict[TeamId, TeamBlackboard] = {}

    def blackboard_for(self, team_id: TeamId | str) -> TeamBlackboard:
        team = TeamId(team_id)
        if team not in self.blackboards:
            self.blackboards[team] = TeamBlackboard(team)
        return self.blackboards[team]

    def add_agent(
        self,
        agent: Agent,
        actions: Sequence[UtilityAction] | None = None,
    ) -> DecisionController:
        """Add an agent and build its controller.

        The agent's blackboard is replaced with its team's shared one.
        """
        if agent.id in self.controllers:
            raise ValueError(f"Agent {agent.id!r} is already on the roster")
        agent.blackboard = self.blackboard_for(agent.team_id)
        self.agents.append(agent)
        controller = DecisionController(
            agent,
            actions if actions is not None else default_actions(),
            self.game_map,
            roster=self.agents,
            perception=self.perception,
        )
        self.controllers[agent.id] = controller
        self.game_map.set_unit(*agent.position, agent.id)
        return controller

    def get_agent(self, agent_id: AgentId | str) -> Agent | None:
        return next((a for a in self.agents if a.id == agent_id), None)

    def live_agents(self, team_id: TeamId | None = None) -> list[Agent]:
        return [
            a
            for a in self.agents
            if a.is_alive and (team_id is None or a.team_id == team_id)
        ]

    def refresh_occupancy(self) -> None:
        self.game_map.clear_units()
        for agent in self.live_agents():
            if not self.game_map.set_unit(*agent.position, agent.id):
                logger.warning(
                    "%s stands on a blocked tile %s", agent.id, agent.position
                )

    # ------------------------------------------------------------------
    # Team-level decisions
    # ------------------------------------------------------------------

    def select_focus_target(self, team_id: TeamId | str) -> AgentId | None:
        """Pick and store a focus target for ``team_id``.

        Prefers the enemy closest (by path) to the team's top objective point
        within FOCUS_OBJECTIVE_RADIUS, otherwise the lowest-health enemy.
        """
        team = TeamId(team_id)
        blackboard = self.blackboard_for(team)
        enemies = [a for a in self.live_agents() if a.team_id != team]

        target: Agent | None = None
        objective_point = next(
            (o.target_position for o in blackboard.objectives if o.target_position),
            None,
        )
        if objective_point is not None:
            near_goal: list[tuple[int, Agent]] = []
            for enemy in enemies:
                distance = self.game_map.get_real_distance(
                    enemy.x, enemy.y, *objective_point
                )
                if 0 <= distance < config.FOCUS_OBJECTIVE_RADIUS:
                    near_goal.append((distance, enemy))
            if near_goal:
                target = min(near_goal, key=lambda item: item[0])[1]

        if target is None and enemies:
            target = min(enemies, key=lambda a: a.health)

        focus_id = target.id if target is not None else None
        blackboard.set_focus_target(focus_id)
        return focus_id

    def winning_team(self) -> TeamId | None:
        """The only team with live agents, or None while the fight is open."""
        alive_teams = {a.team_id for a in self.live_agents()}
        if len(alive_teams) == 1 and len(self.blackboards) > 1:
            return next(iter(alive_teams))
        return None

    # ------------------------------------------------------------------
    # Round loop
    # ------------------------------------------------------------------

    def run_turn(self) -> list[TurnResult]:
        self.turn += 1
        logger.info("=== Turn %d ===", self.turn)
        for agent in self.agents:
            agent.begin_turn(self.turn)
        self.refresh_occupancy()

        if self.focus_interval > 0 and self.turn % self.focus_interval == 0:
            for team_id in self.blackboards:
                self.select_focus_target(team_id)

        results: list[TurnResult] = []
        for agent in list(self.agents):
            if not agent.is_alive:
                continue
            results.append(self.controllers[agent.id].take_turn())
            self.refresh_occupancy()

            winner = self.winning_team()
            if winner is not None:
                logger.info("Team %s wins on turn %d", winner, self.turn)
                publish_event(MessageEvent(f"Team {winner} wins", team_id=winner))
                break
        return results

    def run(self, max_turns: int) -> TeamId | None:
        """Play rounds until a team wins or ``max_turns`` have passed."""
        for _ in range(max_turns):
            self.run_turn()
            winner = self.winning_team()
            if winner is not None:
                return winner
        return None
