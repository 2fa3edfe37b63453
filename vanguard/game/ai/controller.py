"""Per-agent turn decision loop.

DecisionController runs one agent's turn:

1. Refresh what the agent can see.
2. Emergency override: if the retreat action is executable, scores above
   FLEE_UTILITY_THRESHOLD, and the agent's health ratio is below
   FLEE_HEALTH_RATIO_THRESHOLD, run it and end the turn. Nothing else is
   scored, so a marginally better attack can never out-compete panic.
3. Score every executable (action, context) pair. Attack-class actions get
   the top team objective's multiplier.
4. Execute the highest-scoring action. Ties keep the earlier action.

Any exception raised while deciding or executing is caught here, logged,
and the turn falls back to idling. One broken agent never aborts the team's
turn.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vanguard import config
from vanguard.events import ActionChosenEvent, publish_event
from vanguard.game.ai.actions import IdleTurnAction
from vanguard.game.ai.perception import PerceptionComponent
from vanguard.game.ai.utility import (
    ActionCategory,
    ActionContext,
    ScoredAction,
    UtilityAction,
)
from vanguard.types import AgentId

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnResult:
    """What happened on one agent's turn.

    Attributes:
        agent_id: The agent that acted.
        action_name: Name of the executed action, or None if nothing ran.
        utility: Final (weighted) utility of the executed action.
        override: True if the emergency retreat fired.
        fault: True if an exception forced the idle fallback.
        scored: Every scored (action, context) pair, for debugging.
    """

    agent_id: AgentId
    action_name: str | None = None
    utility: float = 0.0
    override: bool = False
    fault: bool = False
    scored: list[ScoredAction] = field(default_factory=list)


class DecisionController:
    """Chooses and executes one action per turn for a single agent.

    Args:
        agent: The controlled agent.
        actions: Candidate actions in priority order. On equal utility the
            earlier action wins.
        game_map: The shared battlefield.
        roster: Every agent on the field, used for perception. The
            controller keeps a reference, so later additions are seen.
        perception: Perception model. Defaults to unlimited-range LOS.
        fallback: Action used when a fault interrupts the turn.
    """

    def __init__(
        self,
        agent: Agent,
        actions: Sequence[UtilityAction],
        game_map: GameMap,
        roster: Sequence[Agent] = (),
        perception: PerceptionComponent | None = None,
        fallback: UtilityAction | None = None,
        debug: bool = False,
    ) -> None:
        self.agent = agent
        self.actions = list(actions)
        self.game_map = game_map
        self.roster = roster
        self.perception = perception or PerceptionComponent()
        self.fallback = fallback or next(
            (a for a in self.actions if a.category is ActionCategory.IDLE),
            IdleTurnAction(),
        )
        self.debug = debug

    @property
    def retreat_action(self) -> UtilityAction | None:
        return next(
            (a for a in self.actions if a.category is ActionCategory.RETREAT), None
        )

    def _self_context(self) -> ActionContext:
        return ActionContext(self.agent, self.game_map)

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------

    def take_turn(self) -> TurnResult:
        agent = self.agent
        result = TurnResult(agent_id=agent.id)
        logger.debug(
            "Turn %d for %s at %s (hp %d/%d, mp %d)",
            agent.current_turn,
            agent.id,
            agent.position,
            agent.health,
            agent.max_health,
            agent.mana,
        )

        try:
            self.perception.refresh(agent, self.game_map, self.roster)

            if self._attempt_retreat_override(result):
                return result

            best_action, best_context, best_utility = self._select(result)
            if best_action is None or best_context is None:
                logger.info("%s has no executable action this turn", agent.id)
                return result

            logger.info(
                "%s chooses %s (%.3f) %s",
                agent.id,
                best_action.name,
                best_utility,
                best_context.describe(),
            )
            best_action.execute(agent, best_context)
            result.action_name = best_action.name
            result.utility = best_utility
        except Exception:
            logger.exception("Turn for %s failed; falling back to idle", agent.id)
            result.fault = True
            self._run_fallback(result)
            return result

        publish_event(ActionChosenEvent(agent.id, result.action_name, result.utility))
        return result

    def _attempt_retreat_override(self, result: TurnResult) -> bool:
        retreat = self.retreat_action
        if retreat is None:
            return False

        agent = self.agent
        context = self._self_context()
        if not retreat.can_execute(agent, context):
            return False

        utility = retreat.calculate_utility(agent, context, self.debug)
        health_ratio = agent.health_ratio
        if (
            utility <= config.FLEE_UTILITY_THRESHOLD
            or health_ratio >= config.FLEE_HEALTH_RATIO_THRESHOLD
        ):
            return False

        logger.info(
            "%s emergency retreat: health %.0f%%, retreat utility %.2f",
            agent.id,
            health_ratio * 100,
            utility,
        )
        retreat.execute(agent, context)
        result.action_name = retreat.name
        result.utility = utility
        result.override = True
        result.scored.append(ScoredAction(retreat.name, utility, utility))
        publish_event(
            ActionChosenEvent(agent.id, retreat.name, utility, override=True)
        )
        return True

    def _objective_multiplier(self, action: UtilityAction) -> float:
        if not action.is_attack:
            return 1.0
        objective = self.agent.blackboard.get_top_objective()
        if objective is None:
            return 1.0
        return 1.0 + config.GLOBAL_OBJECTIVE_WEIGHT * objective.priority

    def _select(
        self, result: TurnResult
    ) -> tuple[UtilityAction | None, ActionContext | None, float]:
        agent = self.agent
        best_action: UtilityAction | None = None
        best_context: ActionContext | None = None
        best_utility = float("-inf")

        for action in self.actions:
            if action.has_context_generator:
                contexts = action.generate_contexts(agent, self.game_map)
            else:
                contexts = [self._self_context()]

            multiplier = self._objective_multiplier(action)
            action_best_context: ActionContext | None = None
            action_best_utility = float("-inf")

            for context in contexts:
                if not action.can_execute(agent, context):
                    continue
                base = action.calculate_utility(agent, context, self.debug)
                utility = base * multiplier
                result.scored.append(
                    ScoredAction(
                        display_name=action.name,
                        final_score=utility,
                        base_score=base,
                        objective_bonus=utility - base,
                        context=context,
                    )
                )
                if utility > action_best_utility:
                    action_best_utility = utility
                    action_best_context = context

            if action_best_context is not None and action_best_utility > best_utility:
                best_utility = action_best_utility
                best_action = action
                best_context = action_best_context

        if self.debug:
            for scored in result.scored:
                logger.debug(
                    "  %s: %.3f %s",
                    scored.display_name,
                    scored.final_score,
                    scored.context.describe() if scored.context else "",
                )
        return best_action, best_context, best_utility

    def _run_fallback(self, result: TurnResult) -> None:
        try:
            self.fallback.execute(self.agent, self._self_context())
        except Exception:
            logger.exception("Idle fallback for %s failed", self.agent.id)
            return
        result.action_name = self.fallback.name
        result.utility = config.IDLE_BASE_SCORE
