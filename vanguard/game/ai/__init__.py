"""
AI system for autonomous agent behavior.

This package contains the utility-based decision system that picks each
agent's action. Every turn the controller scores candidate actions against
every candidate target or destination and executes the highest-scoring one.

Package structure:
    aggregators    - Strategies combining consideration scores: average,
                     weighted average, product, min, max.
    utility        - Scoring framework: ActionContext, Consideration,
                     UtilityAction, ScoredAction, ResponseCurve.
    considerations - Concrete scoring factors.
    actions        - Basic actions: Move, AttackEnemy, Flee, Idle.
    skills         - Skill actions: HealSelf, ArmorBreak, HeavyBlow.
    perception     - PerceptionComponent: line-of-sight awareness.
    controller     - DecisionController that wires it all together.
    behavior_tree  - Optional behavior-tree front-end over the same actions.
"""

from .actions import AttackEnemyAction, FleeAction, IdleTurnAction, MoveAction
from .controller import DecisionController, TurnResult
from .perception import PerceivedAgent, PerceptionComponent
from .skills import ApplyArmorBreakAction, ExecuteHeavyBlowAction, HealSelfAction
from .utility import ActionCategory, ActionContext, ScoredAction, UtilityAction


def default_actions() -> list[UtilityAction]:
    """The standard action set, in tie-break priority order."""
    return [
        FleeAction(),
        HealSelfAction(),
        ExecuteHeavyBlowAction(),
        ApplyArmorBreakAction(),
        AttackEnemyAction(),
        MoveAction(),
        IdleTurnAction(),
    ]


__all__ = [
    "ActionCategory",
    "ActionContext",
    "ApplyArmorBreakAction",
    "AttackEnemyAction",
    "DecisionController",
    "ExecuteHeavyBlowAction",
    "FleeAction",
    "HealSelfAction",
    "IdleTurnAction",
    "MoveAction",
    "PerceivedAgent",
    "PerceptionComponent",
    "ScoredAction",
    "TurnResult",
    "UtilityAction",
    "default_actions",
]
