"""Skill actions: self-heal, armor break, and the heavy-blow follow-up.

Armor break and heavy blow form a combo. Armor break records an
"ArmorBroken" debuff on the team blackboard, and heavy blow scores higher
(and hits harder) against any target carrying it, whichever teammate
applied it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar

from vanguard.constants.combat import CombatConstants as Combat
from vanguard.game.ai.actions import resolve_target, targets_in_range
from vanguard.game.ai.aggregators import (
    Aggregator,
    average_aggregate,
    weighted_average_aggregate,
)
from vanguard.game.ai.considerations import (
    DistanceConsideration,
    HealthConsideration,
    IsTeamFocusTargetConsideration,
    ManaConsideration,
    SkillReadyConsideration,
    TargetHasSetupDebuffConsideration,
)
from vanguard.game.ai.utility import (
    ActionCategory,
    ActionContext,
    Consideration,
    UtilityAction,
)
from vanguard.types import SkillId

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent

logger = logging.getLogger(__name__)


class TargetedSkillAction(UtilityAction):
    """Shared plumbing for skills aimed at one visible enemy."""

    SKILL_ID: ClassVar[SkillId]
    MANA_COST: ClassVar[int]
    RANGE: ClassVar[int]

    def __init__(
        self,
        name: str,
        considerations: list[Consideration],
        aggregator: Aggregator,
    ) -> None:
        super().__init__(
            name=name,
            category=ActionCategory.ATTACK,
            considerations=considerations,
            aggregator=aggregator,
        )

    def generate_contexts(
        self, agent: Agent, game_map: GameMap
    ) -> list[ActionContext]:
        return [
            ActionContext(agent, game_map, target=enemy, skill_id=self.SKILL_ID)
            for enemy in targets_in_range(agent, game_map, self.RANGE)
        ]

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        if context.target is None or not context.target.is_alive:
            return False
        if not agent.is_skill_ready(self.SKILL_ID) or agent.mana < self.MANA_COST:
            return False
        distance = agent.distance_to(context.game_map, context.target)
        return 0 <= distance <= self.RANGE

    def execute(self, agent: Agent, context: ActionContext) -> None:
        target = resolve_target(agent, context)
        if target is None:
            agent.log(f"{self.name} failed: target is gone or out of sight")
            return
        agent.use_skill_on_target(self.SKILL_ID, target)
        self.after_hit(agent, target)

    def after_hit(self, agent: Agent, target: Agent) -> None:
        """Hook for follow-up bookkeeping once the skill has landed."""


class ApplyArmorBreakAction(TargetedSkillAction):
    SKILL_ID = Combat.ARMOR_BREAK
    MANA_COST = Combat.ARMOR_BREAK_MANA
    RANGE = Combat.ARMOR_BREAK_RANGE

    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        SkillReadyConsideration(Combat.ARMOR_BREAK),
        ManaConsideration(Combat.ARMOR_BREAK_MANA),
        DistanceConsideration(1, Combat.ARMOR_BREAK_RANGE),
        IsTeamFocusTargetConsideration(if_focus=1.5, if_not_focus=0.3),
    ]
    WEIGHTS: ClassVar[list[float]] = [0.9, 0.8, 0.6, 1.0]

    def __init__(self, considerations: list[Consideration] | None = None) -> None:
        super().__init__(
            name="ArmorBreak",
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=weighted_average_aggregate(self.WEIGHTS),
        )

    def after_hit(self, agent: Agent, target: Agent) -> None:
        agent.blackboard.set_debuff(
            target.id,
            Combat.ARMOR_BROKEN,
            self.SKILL_ID,
            Combat.ARMOR_BREAK_DURATION_TURNS,
            agent.current_turn,
        )


class ExecuteHeavyBlowAction(TargetedSkillAction):
    SKILL_ID = Combat.HEAVY_BLOW
    MANA_COST = Combat.HEAVY_BLOW_MANA
    RANGE = Combat.HEAVY_BLOW_RANGE

    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        SkillReadyConsideration(Combat.HEAVY_BLOW),
        ManaConsideration(Combat.HEAVY_BLOW_MANA),
        DistanceConsideration(1, Combat.HEAVY_BLOW_RANGE),
        # 1.2 saturates at 1.0; the weight below carries the combo bias.
        TargetHasSetupDebuffConsideration(Combat.ARMOR_BROKEN, 1.2, 0),
        HealthConsideration(is_self=False, is_low_better=True, max_health=120),
    ]
    WEIGHTS: ClassVar[list[float]] = [0.8, 0.7, 0.5, 1.2, 0.6]

    def __init__(self, considerations: list[Consideration] | None = None) -> None:
        super().__init__(
            name="HeavyBlow",
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=weighted_average_aggregate(self.WEIGHTS),
        )


class HealSelfAction(UtilityAction):
    CONSIDERATIONS: ClassVar[list[Consideration]] = [
        SkillReadyConsideration(Combat.HEAL_SELF),
        ManaConsideration(Combat.HEAL_SELF_MANA),
        HealthConsideration(is_self=True, is_low_better=True),
    ]

    def __init__(self, considerations: list[Consideration] | None = None) -> None:
        super().__init__(
            name="HealSelf",
            category=ActionCategory.SELF,
            considerations=(
                considerations if considerations is not None else self.CONSIDERATIONS
            ),
            aggregator=average_aggregate(),
        )

    def can_execute(self, agent: Agent, context: ActionContext) -> bool:
        return (
            agent.is_skill_ready(Combat.HEAL_SELF)
            and agent.mana >= Combat.HEAL_SELF_MANA
            and agent.health < agent.max_health
        )

    def execute(self, agent: Agent, context: ActionContext) -> None:
        agent.use_self_skill(Combat.HEAL_SELF)
