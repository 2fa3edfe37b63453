"""Shared decision state for one team.

A TeamBlackboard is the only channel agents on the same team use to
coordinate. It holds:

- the focus target every attack-class action biases toward,
- debuff records with an inclusive expiry turn, evicted lazily on read,
- a ranked list of global objectives (highest priority first),
- a free-form key/value store for anything else.

The blackboard is a plain object passed into each agent. Agents on a team
run sequentially, so a write by one agent is visible to the next agent in
the same turn without any locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from vanguard.events import (
    DebuffAppliedEvent,
    FocusTargetChangedEvent,
    publish_event,
)
from vanguard.types import (
    AgentId,
    DebuffType,
    SkillId,
    TeamId,
    TurnNumber,
    WorldTilePos,
)

logger = logging.getLogger(__name__)


class GlobalGoalType(Enum):
    CAPTURE_POINT = "CAPTURE_POINT"
    ELIMINATE_ALL_ENEMIES = "ELIMINATE_ALL_ENEMIES"
    DEFEND_POINT = "DEFEND_POINT"
    SURVIVE_TURNS = "SURVIVE_TURNS"


@dataclass(slots=True)
class GlobalObjective:
    """A team-wide strategic goal.

    Attributes:
        type: What kind of goal this is.
        priority: Relative importance. The controller multiplies attack
            utilities by ``1 + weight * priority`` for the top objective.
        target_position: Point of interest for positional goals.
        id: Optional identifier. Adding an objective with an id already on
            the board replaces the old one.
        remaining_turns: Countdown for time-based goals.
    """

    type: GlobalGoalType
    priority: float
    target_position: WorldTilePos | None = None
    id: str | None = None
    remaining_turns: int | None = None


@dataclass(frozen=True, slots=True)
class DebuffRecord:
    """A debuff applied to a target. Active through ``expires_turn`` inclusive."""

    source_skill: SkillId
    applied_turn: TurnNumber
    expires_turn: TurnNumber

    def is_active(self, current_turn: TurnNumber) -> bool:
        return current_turn <= self.expires_turn

    def remaining_turns(self, current_turn: TurnNumber) -> int:
        return self.expires_turn - current_turn


class TeamBlackboard:
    def __init__(self, team_id: TeamId | None = None) -> None:
        self.team_id = team_id
        self._focus_target: AgentId | None = None
        self._debuffs: dict[tuple[AgentId, DebuffType], DebuffRecord] = {}
        self._objectives: list[GlobalObjective] = []
        self._data: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Focus target
    # ------------------------------------------------------------------

    def set_focus_target(self, target_id: AgentId | None) -> None:
        previous = self._focus_target
        self._focus_target = target_id
        if previous != target_id:
            logger.debug(
                "Team %s focus target: %s -> %s", self.team_id, previous, target_id
            )
            publish_event(FocusTargetChangedEvent(previous, target_id))

    def get_focus_target(self) -> AgentId | None:
        return self._focus_target

    # ------------------------------------------------------------------
    # Debuffs
    # ------------------------------------------------------------------

    def set_debuff(
        self,
        target_id: AgentId,
        debuff_type: DebuffType,
        source_skill: SkillId,
        duration_turns: int,
        current_turn: TurnNumber,
    ) -> DebuffRecord:
        """Record a debuff lasting ``duration_turns`` turns starting now.

        The debuff is active on ``current_turn`` and expires after
        ``current_turn + duration_turns - 1``. Re-applying overwrites the
        previous record for the same target and type.
        """
        record = DebuffRecord(
            source_skill=source_skill,
            applied_turn=current_turn,
            expires_turn=current_turn + duration_turns - 1,
        )
        self._debuffs[(target_id, debuff_type)] = record
        logger.debug(
            "Team %s: %s on %s until turn %d (from %s)",
            self.team_id,
            debuff_type,
            target_id,
            record.expires_turn,
            source_skill,
        )
        publish_event(
            DebuffAppliedEvent(
                target_id, debuff_type, source_skill, record.expires_turn
            )
        )
        return record

    def get_debuff_info(
        self, target_id: AgentId, debuff_type: DebuffType, current_turn: TurnNumber
    ) -> DebuffRecord | None:
        """Return the active debuff record, evicting it if it has expired."""
        key = (target_id, debuff_type)
        record = self._debuffs.get(key)
        if record is None:
            return None
        if not record.is_active(current_turn):
            del self._debuffs[key]
            return None
        return record

    def has_debuff(
        self, target_id: AgentId, debuff_type: DebuffType, current_turn: TurnNumber
    ) -> bool:
        return self.get_debuff_info(target_id, debuff_type, current_turn) is not None

    def active_debuffs(
        self, target_id: AgentId, current_turn: TurnNumber
    ) -> dict[DebuffType, DebuffRecord]:
        """All active debuffs on a target, keyed by type. Evicts expired ones."""
        debuff_types = [dt for (tid, dt) in self._debuffs if tid == target_id]
        active: dict[DebuffType, DebuffRecord] = {}
        for debuff_type in debuff_types:
            record = self.get_debuff_info(target_id, debuff_type, current_turn)
            if record is not None:
                active[debuff_type] = record
        return active

    def debuff_count(self) -> int:
        """Number of stored records, expired-but-unread ones included."""
        return len(self._debuffs)

    # ------------------------------------------------------------------
    # Objectives
    # ------------------------------------------------------------------

    def add_objective(self, objective: GlobalObjective) -> None:
        if objective.id is not None:
            self._objectives = [o for o in self._objectives if o.id != objective.id]
        self._objectives.append(objective)
        # Stable sort keeps insertion order among equal priorities.
        self._objectives.sort(key=lambda o: o.priority, reverse=True)
        logger.debug(
            "Team %s objective added: %s (priority %.2f)",
            self.team_id,
            objective.type.value,
            objective.priority,
        )

    def remove_objective(self, objective_id: str) -> bool:
        before = len(self._objectives)
        self._objectives = [o for o in self._objectives if o.id != objective_id]
        return len(self._objectives) != before

    def clear_objectives(self) -> None:
        self._objectives.clear()

    def get_top_objective(self) -> GlobalObjective | None:
        return self._objectives[0] if self._objectives else None

    @property
    def objectives(self) -> list[GlobalObjective]:
        """Objectives ranked highest priority first (a copy)."""
        return list(self._objectives)

    # ------------------------------------------------------------------
    # Generic store
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        return True
