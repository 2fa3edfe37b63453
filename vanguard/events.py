"""Global event system for decoupling narration and cross-system notifications.

This event bus is designed for observers of the decision core only: replay
recorders, consoles, and tests that want to see what agents did.

USE FOR:
- Human-readable narration of executed actions
- Notifications that an agent was defeated
- Blackboard changes other systems care about (focus target, debuffs)

DO NOT USE FOR:
- Scoring or selection (considerations must never depend on events)
- Operations that need immediate return values or synchronous confirmation
- Error handling or exception propagation

The event bus is fire-and-forget: publish an event without expecting return values
or confirmations. All handlers execute immediately (synchronously). If you need a
return value or confirmation, use direct method calls.
"""

import logging
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from typing import Any

from vanguard.types import AgentId, TeamId

logger = logging.getLogger(__name__)


@dataclass
class GameEvent:
    """Base class for all game events."""

    pass


@dataclass
class MessageEvent(GameEvent):
    """Narration line emitted by an agent or a team system."""

    text: str
    source_id: AgentId | None = None
    team_id: TeamId | None = None


@dataclass
class AgentDefeatedEvent(GameEvent):
    """Event for when an agent's health reaches zero."""

    agent: Any  # Avoid circular imports
    defeated_by: Any = None


@dataclass
class FocusTargetChangedEvent(GameEvent):
    """Fired when a team blackboard changes its shared focus target."""

    previous: AgentId | None
    current: AgentId | None


@dataclass
class DebuffAppliedEvent(GameEvent):
    """Fired when a debuff record is written to a team blackboard.

    Attributes:
        target_id: The debuffed agent.
        debuff_type: Debuff identifier, e.g. "ArmorBroken".
        source_skill: The skill that applied it.
        expires_turn: Last turn (inclusive) on which the debuff is active.
    """

    target_id: AgentId
    debuff_type: str
    source_skill: str
    expires_turn: int


@dataclass
class ActionChosenEvent(GameEvent):
    """Fired by the decision controller after it picks and runs an action."""

    agent_id: AgentId
    action_name: str
    utility: float
    override: bool = False


class EventBus:
    """Simple event bus for publish/subscribe pattern."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = {}

    def subscribe(self, event_type: type, handler: Callable) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        """Unsubscribe a handler from an event type."""
        if event_type in self._handlers:
            with suppress(ValueError):
                self._handlers[event_type].remove(handler)

    def publish(self, event: GameEvent) -> None:
        """Publish an event to all subscribed handlers."""
        event_type = type(event)
        if event_type in self._handlers:
            # Copy the handler list to allow safe subscribe/unsubscribe during dispatch
            for handler in list(self._handlers[event_type]):
                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Error handling event {event_type.__name__}")


# Global event bus instance
_global_event_bus = EventBus()


# Public API functions
def subscribe_to_event(event_type: type, handler: Callable) -> None:
    """Subscribe to an event type globally."""
    _global_event_bus.subscribe(event_type, handler)


def unsubscribe_from_event(event_type: type, handler: Callable) -> None:
    """Unsubscribe from an event type globally."""
    _global_event_bus.unsubscribe(event_type, handler)


def publish_event(event: GameEvent) -> None:
    """Publish an event globally."""
    _global_event_bus.publish(event)


def reset_event_bus_for_testing() -> None:
    """Reset the global event bus. Use only in tests."""
    global _global_event_bus
    _global_event_bus = EventBus()
