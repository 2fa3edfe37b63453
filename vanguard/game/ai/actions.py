"""Basic utility actions: move, melee attack, flee, idle.

Skill-based actions live in skills.py.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from vanguard import config
from vanguard.constants.combat import CombatConstants as Combat
from vanguard.game.ai.aggregators import Aggregator, average_aggregate
from vanguard.game.ai.considerations import (
    DestinationChaseFocusTargetConsideration,
    DestinationProximityToObjectiveConsideration,
    DestinationSafetyConsideration,
    DistanceConsideration,
    HealthConsideration,
    IsTeamFocusTargetConsideration,
    TargetUnderAttackConsideration,
)
from vanguard.game.ai.utility import (
    ActionCategory,
    ActionContext,
    Consideration,
    UtilityAction,
)
from vanguard.game.blackboard import GlobalGoalType
from vanguard.types import WorldTilePos

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent

logger = logging.getLogger(__name__)


def resolve_target(agent: Agent, context: ActionContext) -> Agent | None:
    """Return the live, still-visible agent the context points at."""
    if context.target is None:
        return None
    for enemy in agent.visible_enemies:
        if enemy.id == context.target.id and enemy.is_alive:
            return enemy
    return None


def targets_in_range(agent: Agent, game_map: GameMap, max_range: int) -> list[Agent]:
    """Visible live enemies whose path distance is within ``max_range``."""
    in_range: list[Agent] = []
    for enemy in agent.visible_enemies:
        if not enemy.is_alive:
            continue
        distance = agent.distance_to(game_map, enemy)
        if 0 <= distance <= max_range:
            in_range.append(enemy)
    return in_range


class MoveAction(UtilityAction):
    """Reposition within movement range.

    Candidates are every reachable tile plus the current tile. Staying put
    is generated so it can be scored for debug output, but ``can_execute``
    rejects it: not moving is what IdleTurnAction is for.
    """

    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        DestinationSafetyConsideration(max_threat_distance=5),
        DestinationChaseFocusTargetConsideration(max_chase=10),
        DestinationProximityToObjectiveConsideration(GlobalGoalType.CAPTURE_POINT),
    ]

    def __init__(
        self,
        considerations: list[Consideration] | None = None,
        aggregator: Aggregator | None = None,
    ) -> None:
        super().__init__(
            name="Move",
            category=ActionCategory.MOVEMENT,
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=aggregator or average_aggregate(),
        )

    def generate_contexts(
        self, agent: Agent, game_map: GameMap
    ) -> list[ActionContext]:
        contexts = [
            ActionContext(agent, game_map, destination=pos)
            for pos in agent.reachable_positions(game_map)
        ]
        contexts.append(ActionContext(agent, game_map, destination=agent.position))
        return contexts

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        if context.destination is None:
            return False
        distance = context.game_map.get_real_distance(
            agent.x, agent.y, *context.destination
        )
        return 0 < distance <= agent.movement_range

    def execute(self, agent: Agent, context: ActionContext) -> None:
        if context.destination is None:
            agent.log("move failed: no destination")
            return
        agent.move(context.destination, context.game_map)


class AttackEnemyAction(UtilityAction):
    """Basic melee attack against an adjacent visible enemy."""

    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        DistanceConsideration(Combat.MELEE_RANGE, Combat.MELEE_RANGE),
        IsTeamFocusTargetConsideration(if_focus=1.5, if_not_focus=0.5),
        TargetUnderAttackConsideration(),
        HealthConsideration(is_self=False, is_low_better=True, max_health=120),
    ]

    def __init__(
        self,
        considerations: list[Consideration] | None = None,
        aggregator: Aggregator | None = None,
    ) -> None:
        super().__init__(
            name="AttackEnemy",
            category=ActionCategory.ATTACK,
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=aggregator or average_aggregate(),
        )

    def generate_contexts(
        self, agent: Agent, game_map: GameMap
    ) -> list[ActionContext]:
        return [
            ActionContext(agent, game_map, target=enemy)
            for enemy in targets_in_range(agent, game_map, Combat.MELEE_RANGE)
        ]

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        if context.target is None or not context.target.is_alive:
            return False
        distance = agent.distance_to(context.game_map, context.target)
        return 0 <= distance <= Combat.MELEE_RANGE

    def execute(self, agent: Agent, context: ActionContext) -> None:
        target = resolve_target(agent, context)
        if target is None:
            agent.log(f"{self.name} failed: target is gone or out of sight")
            return
        agent.attack(target)


class FleeAction(UtilityAction):
    """Retreat to the reachable tile farthest from the nearest visible enemy.

    This is the controller's designated retreat action: it can preempt
    normal selection when the agent is badly hurt.
    """

    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        # Lower health means a stronger urge to run.
        HealthConsideration(is_self=True, is_low_better=True),
    ]

    def __init__(
        self,
        considerations: list[Consideration] | None = None,
        aggregator: Aggregator | None = None,
    ) -> None:
        super().__init__(
            name="Flee",
            category=ActionCategory.RETREAT,
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=aggregator or average_aggregate(),
        )

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        return bool(agent.visible_enemies) and agent.health < agent.max_health

    def find_safest_position(
        self, agent: Agent, game_map: GameMap
    ) -> WorldTilePos | None:
        """Reachable tile that maximizes the distance to the nearest enemy.

        Enemies that cannot reach a tile at all are ignored for that tile.
        Returns None if no tile is strictly safer than standing still.
        """
        enemies = [e for e in agent.visible_enemies if e.is_alive]

        def nearest_enemy_distance(pos: WorldTilePos) -> float:
            nearest = float("inf")
            for enemy in enemies:
                distance = game_map.get_real_distance(*pos, enemy.x, enemy.y)
                if distance >= 0:
                    nearest = min(nearest, distance)
            return nearest

        best_pos: WorldTilePos | None = None
        best_distance = nearest_enemy_distance(agent.position)
        for pos in agent.reachable_positions(game_map):
            distance = nearest_enemy_distance(pos)
            if distance > best_distance:
                best_distance = distance
                best_pos = pos
        return best_pos

    def execute(self, agent: Agent, context: ActionContext) -> None:
        safe = self.find_safest_position(agent, context.game_map)
        if safe is None:
            agent.log("no safer tile to flee to, holding position")
            agent.idle()
            return
        agent.move(safe, context.game_map)
        agent.log(f"fled to {safe}")


class IdleTurnAction(UtilityAction):
    """Always-available fallback with a fixed low utility."""

    def __init__(self) -> None:
        super().__init__(name="Idle", category=ActionCategory.IDLE)

    def calculate_utility(
        self, agent: Agent, context: ActionContext, debug: bool = False
    ) -> float:
        # Resting is slightly more attractive when out of mana but not hurt.
        if (
            agent.mana < config.IDLE_LOW_MANA_THRESHOLD
            and agent.health > config.IDLE_HEALTHY_THRESHOLD
        ):
            return config.IDLE_LOW_MANA_SCORE
        return config.IDLE_BASE_SCORE

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        return True

    def execute(self, agent: Agent, context: ActionContext) -> None:
        agent.idle()
