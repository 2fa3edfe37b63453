"""Behavior-tree front-end over the utility actions.

A tree is an alternate way to pick an agent's action. Its leaves are named
conditions and named actions resolved against an explicit NodeRegistry.
Action leaves wrap the same UtilityAction objects the DecisionController
uses, so scoring and execution logic lives in one place.

Trees are described as nested dicts and built once::

    layout = {
        "selector": [
            {"sequence": [{"condition": "IsInDanger"}, {"action": "Flee"}]},
            {"sequence": [{"condition": "HasEnemyInRange"},
                          {"action": "AttackEnemy"}]},
            {"action": "Idle"},
        ]
    }
    tree = BehaviorTree.build(layout, registry)
    tree.tick(agent, game_map)

Every name is resolved at build time. A name that is not registered raises
UnknownNodeError immediately instead of failing on some later tick.
"""

from __future__ import annotations

import abc
import collections.abc as cabc
import logging
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeAlias

from vanguard import config
from vanguard.game.ai.actions import targets_in_range
from vanguard.game.ai.utility import ActionContext, UtilityAction

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.agent import Agent

logger = logging.getLogger(__name__)

ConditionFn: TypeAlias = Callable[["Agent", "GameMap"], bool]
ActionFn: TypeAlias = Callable[["Agent", "GameMap"], bool]


class NodeStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class UnknownNodeError(LookupError):
    """Raised when a tree references a name missing from the registry."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"Unknown {kind} node: {name!r}")
        self.kind = kind
        self.name = name


class InvalidTreeError(ValueError):
    """Raised for a structurally malformed tree description."""


def run_utility_action(action: UtilityAction, agent: Agent, game_map: GameMap) -> bool:
    """Execute ``action`` on its best executable context.

    Returns False if no context passes ``can_execute``.
    """
    if action.has_context_generator:
        contexts = action.generate_contexts(agent, game_map)
    else:
        contexts = [ActionContext(agent, game_map)]

    best_context: ActionContext | None = None
    best_utility = float("-inf")
    for context in contexts:
        if not action.can_execute(agent, context):
            continue
        utility = action.calculate_utility(agent, context)
        if utility > best_utility:
            best_utility = utility
            best_context = context

    if best_context is None:
        return False
    action.execute(agent, best_context)
    return True


class NodeRegistry:
    """Explicit name -> callable table for condition and action leaves."""

    def __init__(self) -> None:
        self._conditions: dict[str, ConditionFn] = {}
        self._actions: dict[str, ActionFn] = {}

    def register_condition(self, name: str, fn: ConditionFn) -> None:
        self._conditions[name] = fn

    def register_action_fn(self, name: str, fn: ActionFn) -> None:
        self._actions[name] = fn

    def register_action(self, action: UtilityAction, name: str | None = None) -> None:
        """Register a utility action as a leaf under its own name by default."""

        def run(agent: Agent, game_map: GameMap) -> bool:
            return run_utility_action(action, agent, game_map)

        self._actions[name or action.name] = run

    def register_actions(self, actions: Iterable[UtilityAction]) -> None:
        for action in actions:
            self.register_action(action)

    def condition(self, name: str) -> ConditionFn:
        try:
            return self._conditions[name]
        except KeyError:
            raise UnknownNodeError("condition", name) from None

    def action(self, name: str) -> ActionFn:
        try:
            return self._actions[name]
        except KeyError:
            raise UnknownNodeError("action", name) from None

    def has_condition(self, name: str) -> bool:
        return name in self._conditions

    def has_action(self, name: str) -> bool:
        return name in self._actions


# ---------------------------------------------------------------------------
# Built-in conditions
# ---------------------------------------------------------------------------


def is_in_danger(agent: Agent, game_map: GameMap) -> bool:
    """Badly hurt with an enemy in sight."""
    return (
        bool(agent.visible_enemies)
        and agent.health_ratio < config.FLEE_HEALTH_RATIO_THRESHOLD
    )


def has_enemy_in_range(agent: Agent, game_map: GameMap) -> bool:
    return bool(targets_in_range(agent, game_map, 1))


def has_visible_enemy(agent: Agent, game_map: GameMap) -> bool:
    return bool(agent.visible_enemies)


def is_wounded(agent: Agent, game_map: GameMap) -> bool:
    return agent.health < agent.max_health


BUILTIN_CONDITIONS: dict[str, ConditionFn] = {
    "IsInDanger": is_in_danger,
    "HasEnemyInRange": has_enemy_in_range,
    "HasVisibleEnemy": has_visible_enemy,
    "IsWounded": is_wounded,
}


def default_registry(actions: Iterable[UtilityAction] = ()) -> NodeRegistry:
    """Registry with the built-in conditions and the given actions."""
    registry = NodeRegistry()
    for name, fn in BUILTIN_CONDITIONS.items():
        registry.register_condition(name, fn)
    registry.register_actions(actions)
    return registry


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class Node(abc.ABC):
    @abc.abstractmethod
    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus: ...


class Selector(Node):
    """Succeeds on the first child that succeeds."""

    def __init__(self, children: cabc.Sequence[Node]) -> None:
        self.children = list(children)

    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus:
        for child in self.children:
            if child.tick(agent, game_map) is NodeStatus.SUCCESS:
                return NodeStatus.SUCCESS
        return NodeStatus.FAILURE


class Sequence(Node):
    """Fails on the first child that fails."""

    def __init__(self, children: cabc.Sequence[Node]) -> None:
        self.children = list(children)

    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus:
        for child in self.children:
            if child.tick(agent, game_map) is NodeStatus.FAILURE:
                return NodeStatus.FAILURE
        return NodeStatus.SUCCESS


class Condition(Node):
    def __init__(self, name: str, fn: ConditionFn) -> None:
        self.name = name
        self.fn = fn

    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus:
        return NodeStatus.SUCCESS if self.fn(agent, game_map) else NodeStatus.FAILURE


class ActionNode(Node):
    def __init__(self, name: str, fn: ActionFn) -> None:
        self.name = name
        self.fn = fn

    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus:
        if self.fn(agent, game_map):
            logger.debug("%s ran behavior-tree action %s", agent.id, self.name)
            return NodeStatus.SUCCESS
        return NodeStatus.FAILURE


_COMPOSITES: dict[str, type[Selector] | type[Sequence]] = {
    "selector": Selector,
    "sequence": Sequence,
}


class BehaviorTree:
    def __init__(self, root: Node) -> None:
        self.root = root

    @classmethod
    def build(cls, layout: Mapping[str, Any], registry: NodeRegistry) -> BehaviorTree:
        """Build a tree, resolving every leaf name against ``registry``.

        Raises:
            UnknownNodeError: A condition or action name is not registered.
            InvalidTreeError: A node description is malformed.
        """
        return cls(cls._build_node(layout, registry))

    @classmethod
    def _build_node(cls, layout: Mapping[str, Any], registry: NodeRegistry) -> Node:
        if not isinstance(layout, Mapping) or len(layout) != 1:
            raise InvalidTreeError(f"Node must be a one-key mapping, got {layout!r}")
        ((kind, value),) = layout.items()

        if kind in _COMPOSITES:
            is_list = isinstance(value, cabc.Sequence) and not isinstance(value, str)
            if not is_list or not value:
                raise InvalidTreeError(f"{kind} needs a non-empty list of children")
            children = [cls._build_node(child, registry) for child in value]
            return _COMPOSITES[kind](children)
        if kind == "condition":
            return Condition(value, registry.condition(value))
        if kind == "action":
            return ActionNode(value, registry.action(value))
        raise InvalidTreeError(f"Unknown node kind {kind!r}")

    def tick(self, agent: Agent, game_map: GameMap) -> NodeStatus:
        return self.root.tick(agent, game_map)
