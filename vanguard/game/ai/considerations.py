"""Concrete considerations.

Grouped by what they look at:

    basic      - distance to target, health, mana, skill readiness
    teamwork   - focus target, target already hurt, setup debuffs
    movement   - scoring a candidate destination tile
    objective  - relation to the team's top global objective

Target-based considerations score 0 when the context has no target, and
movement considerations score 0 when it has no destination, unless noted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from vanguard import config
from vanguard.game import ranges
from vanguard.game.ai.utility import (
    ActionContext,
    Consideration,
    ResponseCurve,
    ResponseCurveType,
)
from vanguard.types import DebuffType, SkillId, WorldTilePos

if TYPE_CHECKING:
    from vanguard.game.blackboard import GlobalGoalType, GlobalObjective


# ---------------------------------------------------------------------------
# Basic
# ---------------------------------------------------------------------------


class DistanceConsideration(Consideration):
    """Full score at or inside ``ideal``, linear falloff to 0 at ``max_relevant``.

    Uses path distance, so a target behind a wall is farther than it looks.
    An unreachable target scores 0.
    """

    name = "distance"

    def __init__(self, ideal: int, max_relevant: int) -> None:
        super().__init__()
        self.ideal = ideal
        self.max_relevant = max_relevant

    def evaluate(self, context: ActionContext) -> float:
        target = context.target
        if target is None:
            return 0.0

        agent = context.agent
        distance = context.game_map.get_real_distance(
            agent.x, agent.y, target.x, target.y
        )
        if distance < 0 or distance > self.max_relevant:
            return 0.0
        if distance <= self.ideal:
            return 1.0

        span = self.max_relevant - self.ideal
        return max(0.0, 1.0 - (distance - self.ideal) / span)


class HealthConsideration(Consideration):
    """Health ratio of the agent itself or of the context target.

    With ``is_low_better`` the ratio is inverted, so missing health scores
    high (used for healing, retreating, and picking off weak targets).

    Self health is measured against the agent's own ``max_health`` unless an
    explicit ``max_health`` is given. Target health uses ``max_health``, or
    ``config.DEFAULT_MAX_HEALTH`` when none is given.
    """

    name = "health"

    def __init__(
        self,
        is_self: bool,
        is_low_better: bool,
        max_health: int | None = None,
    ) -> None:
        curve = ResponseCurve(
            ResponseCurveType.INVERSE if is_low_better else ResponseCurveType.LINEAR
        )
        super().__init__(curve)
        self.is_self = is_self
        self.is_low_better = is_low_better
        self.max_health = max_health

    def evaluate(self, context: ActionContext) -> float:
        if self.is_self:
            if self.max_health is None:
                return context.agent.health_ratio
            return context.agent.health / self.max_health
        if context.target is None:
            # No target scores 0 once the curve is applied.
            return 1.0 if self.is_low_better else 0.0
        max_health = self.max_health or config.DEFAULT_MAX_HEALTH
        return context.target.health / max_health


class ManaConsideration(Consideration):
    name = "mana"

    def __init__(self, required: int) -> None:
        super().__init__()
        self.required = required

    def evaluate(self, context: ActionContext) -> float:
        return 1.0 if context.agent.mana >= self.required else 0.0


class SkillReadyConsideration(Consideration):
    name = "skill ready"

    def __init__(self, skill_id: SkillId) -> None:
        super().__init__()
        self.skill_id = skill_id

    def evaluate(self, context: ActionContext) -> float:
        return 1.0 if context.agent.is_skill_ready(self.skill_id) else 0.0


# ---------------------------------------------------------------------------
# Teamwork
# ---------------------------------------------------------------------------


class IsTeamFocusTargetConsideration(Consideration):
    """Prefer the team's focus target. Values above 1 saturate at 1."""

    name = "team focus"

    def __init__(self, if_focus: float = 1.0, if_not_focus: float = 0.1) -> None:
        super().__init__()
        self.if_focus = if_focus
        self.if_not_focus = if_not_focus

    def evaluate(self, context: ActionContext) -> float:
        target = context.target
        if target is None:
            return self.if_not_focus
        focus = context.agent.blackboard.get_focus_target()
        if focus is not None and target.id == focus:
            return self.if_focus
        return self.if_not_focus


class TargetUnderAttackConsideration(Consideration):
    """Missing health as a proxy for "teammates are already on it"."""

    name = "target under attack"

    def __init__(self, max_health: int = 120) -> None:
        super().__init__()
        self.max_health = max_health

    def evaluate(self, context: ActionContext) -> float:
        if context.target is None:
            return 0.0
        return 1.0 - context.target.health / self.max_health


class TargetHasSetupDebuffConsideration(Consideration):
    """Reward follow-up attacks on a target a teammate has set up."""

    name = "setup debuff"

    def __init__(
        self,
        debuff_type: DebuffType,
        score_if_present: float = 1.0,
        min_remaining_turns: int = 0,
    ) -> None:
        super().__init__()
        self.debuff_type = debuff_type
        self.score_if_present = score_if_present
        self.min_remaining_turns = min_remaining_turns

    def evaluate(self, context: ActionContext) -> float:
        if context.target is None:
            return 0.0
        agent = context.agent
        record = agent.blackboard.get_debuff_info(
            context.target.id, self.debuff_type, agent.current_turn
        )
        if record is None:
            return 0.0
        if record.remaining_turns(agent.current_turn) < self.min_remaining_turns:
            return 0.0
        return self.score_if_present


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------


class DestinationSafetyConsideration(Consideration):
    """1.0 far from visible enemies, lower as healthy enemies get close."""

    name = "destination safety"

    def __init__(self, max_threat_distance: float = 5) -> None:
        super().__init__()
        self.max_threat_distance = max_threat_distance

    def evaluate(self, context: ActionContext) -> float:
        if context.destination is None:
            return 0.0
        enemies = context.agent.visible_enemies
        if not enemies:
            return 1.0

        dx, dy = context.destination
        threats: list[float] = []
        for enemy in enemies:
            distance = ranges.euclidean_distance(dx, dy, enemy.x, enemy.y)
            if distance <= self.max_threat_distance:
                proximity = 1.0 - distance / self.max_threat_distance
                threats.append(proximity * enemy.health_ratio)

        if not threats:
            return 1.0
        return max(0.0, 1.0 - sum(threats) / len(threats))


def _proximity_score(
    pos: WorldTilePos, goal: WorldTilePos, max_distance: float
) -> float:
    distance = ranges.euclidean_distance(*pos, *goal)
    if distance > max_distance:
        return 0.0
    if distance < 0.5:
        return 1.0
    return max(0.0, 1.0 - distance / max_distance)


def _matching_objective(
    context: ActionContext, objective_type: GlobalGoalType
) -> GlobalObjective | None:
    objective = context.agent.blackboard.get_top_objective()
    if (
        objective is None
        or objective.type is not objective_type
        or objective.target_position is None
    ):
        return None
    return objective


class DestinationProximityToObjectiveConsideration(Consideration):
    name = "destination near objective"

    def __init__(
        self,
        objective_type: GlobalGoalType,
        max_distance: float = 20,
        no_objective_score: float = 0.1,
    ) -> None:
        super().__init__()
        self.objective_type = objective_type
        self.max_distance = max_distance
        self.no_objective_score = no_objective_score

    def evaluate(self, context: ActionContext) -> float:
        if context.destination is None:
            return 0.0
        objective = _matching_objective(context, self.objective_type)
        if objective is None:
            return self.no_objective_score
        assert objective.target_position is not None
        return _proximity_score(
            context.destination, objective.target_position, self.max_distance
        )


class DestinationChaseFocusTargetConsideration(Consideration):
    """Pull movement toward the team's focus target if it is visible."""

    name = "chase focus target"

    IDEAL_ATTACK_DISTANCE = 1.5
    NO_FOCUS_SCORE = 0.1

    def __init__(self, max_chase: float = 10) -> None:
        super().__init__()
        self.max_chase = max_chase

    def evaluate(self, context: ActionContext) -> float:
        if context.destination is None:
            return 0.0
        focus_id = context.agent.blackboard.get_focus_target()
        if focus_id is None:
            return self.NO_FOCUS_SCORE
        focus = next(
            (e for e in context.agent.visible_enemies if e.id == focus_id), None
        )
        if focus is None:
            return self.NO_FOCUS_SCORE

        distance = ranges.euclidean_distance(*context.destination, focus.x, focus.y)
        if distance > self.max_chase:
            return 0.0
        if distance <= self.IDEAL_ATTACK_DISTANCE:
            return 1.0
        span = self.max_chase - self.IDEAL_ATTACK_DISTANCE
        return max(0.0, 1.0 - (distance - self.IDEAL_ATTACK_DISTANCE) / span)


class StayPutConsideration(Consideration):
    """Small bonus for the "don't move" candidate."""

    name = "stay put"

    def __init__(self, bonus: float = 0.2) -> None:
        super().__init__()
        self.bonus = bonus

    def evaluate(self, context: ActionContext) -> float:
        if context.destination is None:
            return 0.0
        return self.bonus if context.destination == context.agent.position else 0.0


# ---------------------------------------------------------------------------
# Objective
# ---------------------------------------------------------------------------


class ProximityToGoalPositionConsideration(Consideration):
    """How close the agent currently is to the objective point."""

    name = "near goal"

    NO_OBJECTIVE_SCORE = 0.1

    def __init__(
        self, objective_type: GlobalGoalType, max_distance: float = 20
    ) -> None:
        super().__init__()
        self.objective_type = objective_type
        self.max_distance = max_distance

    def evaluate(self, context: ActionContext) -> float:
        objective = _matching_objective(context, self.objective_type)
        if objective is None:
            return self.NO_OBJECTIVE_SCORE
        assert objective.target_position is not None
        return _proximity_score(
            context.agent.position, objective.target_position, self.max_distance
        )


class ClearDefendersAtGoalConsideration(Consideration):
    """Prefer weak enemies standing on or near the objective point."""

    name = "clear defenders"

    NO_OBJECTIVE_SCORE = 0.05
    AWAY_FROM_GOAL_SCORE = 0.1
    WEAK_DEFENDER_SCALE = 0.8

    def __init__(
        self, objective_type: GlobalGoalType, clearance_radius: float = 3
    ) -> None:
        super().__init__()
        self.objective_type = objective_type
        self.clearance_radius = clearance_radius

    def evaluate(self, context: ActionContext) -> float:
        target = context.target
        if target is None:
            return 0.0
        objective = _matching_objective(context, self.objective_type)
        if objective is None:
            return self.NO_OBJECTIVE_SCORE
        assert objective.target_position is not None

        distance = ranges.euclidean_distance(
            *target.position, *objective.target_position
        )
        if distance <= self.clearance_radius:
            return (1.0 - max(0.0, target.health_ratio)) * self.WEAK_DEFENDER_SCALE
        return self.AWAY_FROM_GOAL_SCORE
