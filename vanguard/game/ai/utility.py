"""Utility-based scoring framework for agent decision-making."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from vanguard import config
from vanguard.config import MIN_SCORE
from vanguard.game.ai.aggregators import Aggregator, average_aggregate
from vanguard.types import SkillId, WorldTilePos

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent

logger = logging.getLogger(__name__)


def _clamp(value: float, min_value: float = 0.0, max_value: float = 1.0) -> float:
    return max(min_value, min(max_value, value))


class ResponseCurveType(Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    INVERSE = "inverse"
    STEP = "step"
    BELL = "bell"


@dataclass(slots=True)
class ResponseCurve:
    curve_type: ResponseCurveType
    exponent: float = 2.0
    threshold: float = 0.5
    peak: float = 0.5
    width: float = 0.5

    def evaluate(self, value: float) -> float:
        value = _clamp(value)
        match self.curve_type:
            case ResponseCurveType.LINEAR:
                return value
            case ResponseCurveType.EXPONENTIAL:
                return value**self.exponent
            case ResponseCurveType.INVERSE:
                return 1.0 - value
            case ResponseCurveType.STEP:
                return 1.0 if value >= self.threshold else 0.0
            case ResponseCurveType.BELL:
                if self.width <= 0:
                    return 0.0
                return _clamp(1.0 - abs(value - self.peak) / self.width)
        return 0.0


@dataclass(frozen=True, slots=True)
class ActionContext:
    """One candidate (destination / target / skill) for one action.

    Contexts are immutable. Use :meth:`with_` to derive a variant.
    """

    agent: Agent
    game_map: GameMap
    destination: WorldTilePos | None = None
    target: Agent | None = None
    skill_id: SkillId | None = None

    def with_(self, **changes: object) -> ActionContext:
        return replace(self, **changes)

    def describe(self) -> str:
        parts: list[str] = []
        if self.target is not None:
            parts.append(f"target={self.target.id}")
        if self.destination is not None:
            parts.append(f"dest={self.destination}")
        if self.skill_id is not None:
            parts.append(f"skill={self.skill_id}")
        return ", ".join(parts)


class Consideration(abc.ABC):
    """A single scoring factor.

    Subclasses implement :meth:`evaluate`. Callers use :meth:`score`, which
    runs the optional response curve and clamps the result into [0, 1], so
    an out-of-range raw value (e.g. a 1.5 focus bonus) saturates at 1.
    Considerations only read state; they never mutate it.
    """

    name: str = "consideration"

    def __init__(self, curve: ResponseCurve | None = None) -> None:
        self.curve = curve

    @abc.abstractmethod
    def evaluate(self, context: ActionContext) -> float:
        """Return the raw score for this context."""
        ...

    def score(self, context: ActionContext) -> float:
        value = self.evaluate(context)
        if self.curve is not None:
            value = self.curve.evaluate(value)
        return _clamp(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ActionCategory(Enum):
    """Coarse action classes used by the controller."""

    ATTACK = "attack"  # Boosted by the team's top objective
    MOVEMENT = "movement"
    SELF = "self"
    RETREAT = "retreat"  # Eligible for the emergency override
    IDLE = "idle"


class UtilityAction(abc.ABC):
    """Base class for utility actions.

    An action owns an ordered list of considerations and an aggregator.
    The controller asks it for candidate contexts (if it generates any),
    filters them with :meth:`can_execute`, scores them with
    :meth:`calculate_utility`, and finally calls :meth:`execute` on the
    winner. ``execute`` is the only method allowed to change game state.
    """

    def __init__(
        self,
        name: str,
        category: ActionCategory,
        considerations: list[Consideration] | None = None,
        aggregator: Aggregator | None = None,
    ) -> None:
        self.name = name
        self.category = category
        self.considerations = considerations or []
        self.aggregator = aggregator or average_aggregate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @property
    def is_attack(self) -> bool:
        return self.category is ActionCategory.ATTACK

    @property
    def has_context_generator(self) -> bool:
        """True if this action enumerates its own candidate contexts."""
        return type(self).generate_contexts is not UtilityAction.generate_contexts

    def generate_contexts(
        self, agent: Agent, game_map: GameMap
    ) -> list[ActionContext]:
        """Enumerate candidate contexts. Actions without candidates use the
        implicit self context instead."""
        return [ActionContext(agent, game_map)]

    def calculate_utility(
        self, agent: Agent, context: ActionContext, debug: bool = False
    ) -> float:
        """Score this action for ``context``. Never below MIN_SCORE."""
        scores = [c.score(context) for c in self.considerations]
        utility = max(MIN_SCORE, self.aggregator(scores))

        if debug or config.LOG_SCORE_BREAKDOWN:
            breakdown = ", ".join(
                f"{c.name}={s:.3f}"
                for c, s in zip(self.considerations, scores, strict=True)
            )
            logger.debug(
                "[%s] %s (%s) -> %.4f [%s]",
                agent.id,
                self.name,
                context.describe(),
                utility,
                breakdown,
            )
        return utility

    @abc.abstractmethod
    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        """Hard gate evaluated before scoring."""
        ...

    @abc.abstractmethod
    def execute(self, agent: Agent, context: ActionContext) -> None:
        """Carry out the action through the agent's capability interface."""
        ...


@dataclass(slots=True)
class ScoredAction:
    """Debug snapshot of one action's scoring result."""

    display_name: str
    final_score: float
    base_score: float = 0.0
    objective_bonus: float = 0.0
    context: ActionContext | None = None
