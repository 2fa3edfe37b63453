"""Agents: the units the decision core controls.

`Agent` implements the capability interface the AI layer calls into
(`move`, `attack`, `use_skill_on_target`, `use_self_skill`, `idle`, and the
read-only queries). The combat math here is a stand-in so a full turn loop
can run locally; the authoritative rules live with the game server.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from vanguard import config
from vanguard.constants.combat import CombatConstants as Combat
from vanguard.events import AgentDefeatedEvent, MessageEvent, publish_event
from vanguard.types import AgentId, SkillId, TeamId, TurnNumber, WorldTilePos
from vanguard.util import rng

if TYPE_CHECKING:
    from vanguard.environment.map import GameMap
    from vanguard.game.blackboard import TeamBlackboard

logger = logging.getLogger(__name__)

_rng = rng.get("game.agent")

# Per-skill mana cost and cooldown, keyed by skill id.
_SKILL_MANA: dict[SkillId, int] = {
    Combat.HEAL_SELF: Combat.HEAL_SELF_MANA,
    Combat.ARMOR_BREAK: Combat.ARMOR_BREAK_MANA,
    Combat.HEAVY_BLOW: Combat.HEAVY_BLOW_MANA,
}
_SKILL_COOLDOWN: dict[SkillId, int] = {
    Combat.HEAL_SELF: Combat.HEAL_SELF_COOLDOWN,
    Combat.ARMOR_BREAK: Combat.ARMOR_BREAK_COOLDOWN,
    Combat.HEAVY_BLOW: Combat.HEAVY_BLOW_COOLDOWN,
}


class Agent:
    """A controllable unit on the battlefield.

    Attributes:
        id: Unique agent id.
        team_id: Agents sharing a team id share ``blackboard``.
        health, max_health, mana, max_mana: Vital stats.
        position: Current ``(x, y)`` tile.
        movement_range: Max path distance per move.
        cooldowns: Turns remaining before each skill is ready again.
        visible_enemies, visible_allies: Refreshed by perception each turn.
        current_turn: Set by the turn manager at the start of every turn.
    """

    def __init__(
        self,
        agent_id: AgentId | str,
        team_id: TeamId | str,
        position: WorldTilePos,
        blackboard: TeamBlackboard,
        *,
        health: int = config.DEFAULT_MAX_HEALTH,
        max_health: int = config.DEFAULT_MAX_HEALTH,
        mana: int = config.DEFAULT_MAX_MANA,
        max_mana: int = config.DEFAULT_MAX_MANA,
        movement_range: int = config.DEFAULT_MOVEMENT_RANGE,
        random_source: random.Random | None = None,
    ) -> None:
        self.id = AgentId(agent_id)
        self.team_id = TeamId(team_id)
        self.position: WorldTilePos = position
        self.blackboard = blackboard
        self.health = health
        self.max_health = max_health
        self.mana = mana
        self.max_mana = max_mana
        self.movement_range = movement_range
        self.cooldowns: dict[SkillId, int] = {}
        self.visible_enemies: list[Agent] = []
        self.visible_allies: list[Agent] = []
        self.current_turn: TurnNumber = 0
        self._rng = random_source or _rng

    def __repr__(self) -> str:
        return (
            f"Agent({self.id!r}, team={self.team_id!r}, pos={self.position}, "
            f"hp={self.health}/{self.max_health}, mp={self.mana})"
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def health_ratio(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return self.health / self.max_health

    def begin_turn(self, turn: TurnNumber) -> None:
        """Advance per-turn state: record the turn and tick cooldowns down."""
        self.current_turn = turn
        for skill_id in list(self.cooldowns):
            remaining = self.cooldowns[skill_id] - 1
            if remaining <= 0:
                del self.cooldowns[skill_id]
            else:
                self.cooldowns[skill_id] = remaining

    def take_damage(self, amount: int, source: Agent | None = None) -> None:
        was_alive = self.is_alive
        self.health = max(0, self.health - amount)
        if was_alive and not self.is_alive:
            self.log("defeated")
            publish_event(AgentDefeatedEvent(self, defeated_by=source))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_skill_ready(self, skill_id: SkillId) -> bool:
        return self.cooldowns.get(skill_id, 0) <= 0

    def distance_to(self, game_map: GameMap, other: Agent) -> int:
        """Path distance to another agent, -1 if unreachable."""
        return game_map.get_real_distance(self.x, self.y, other.x, other.y)

    def can_see(
        self,
        game_map: GameMap,
        other: Agent,
        from_position: WorldTilePos | None = None,
    ) -> bool:
        fx, fy = from_position or self.position
        return game_map.has_line_of_sight(fx, fy, other.x, other.y)

    def reachable_positions(self, game_map: GameMap) -> list[WorldTilePos]:
        """Tiles within movement range, ordered by (x, y) for stable scoring."""
        return sorted(game_map.reachable_positions(self.position, self.movement_range))

    def debuffs_on(self, target: Agent) -> dict[str, int]:
        """Active debuffs on ``target`` mapped to the turns they still cover."""
        return {
            debuff_type: record.expires_turn - self.current_turn + 1
            for debuff_type, record in self.blackboard.active_debuffs(
                target.id, self.current_turn
            ).items()
        }

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def log(self, message: str) -> None:
        logger.info("[%s (%s)] %s", self.id, self.team_id, message)
        publish_event(MessageEvent(message, source_id=self.id, team_id=self.team_id))

    def move(self, destination: WorldTilePos, game_map: GameMap | None = None) -> None:
        old = self.position
        self.position = destination
        if game_map is not None:
            game_map.remove_unit(*old)
            game_map.set_unit(*destination, self.id)
        self.log(f"moves from {old} to {destination}")

    def attack(self, target: Agent) -> int:
        damage = self._rng.randint(*Combat.ATTACK_DAMAGE)
        self.log(f"attacks {target.id} for {damage}")
        target.take_damage(damage, source=self)
        return damage

    def _spend_skill(self, skill_id: SkillId) -> None:
        self.mana = max(0, self.mana - _SKILL_MANA.get(skill_id, 0))
        cooldown = _SKILL_COOLDOWN.get(skill_id, 0)
        if cooldown > 0:
            self.cooldowns[skill_id] = cooldown

    def use_skill_on_target(self, skill_id: SkillId, target: Agent) -> int:
        """Apply a targeted skill and return the damage dealt."""
        self._spend_skill(skill_id)
        match skill_id:
            case Combat.ARMOR_BREAK:
                damage = self._rng.randint(*Combat.ARMOR_BREAK_DAMAGE)
            case Combat.HEAVY_BLOW:
                damage = self._rng.randint(*Combat.HEAVY_BLOW_DAMAGE)
                if self.blackboard.has_debuff(
                    target.id, Combat.ARMOR_BROKEN, self.current_turn
                ):
                    damage = int(damage * Combat.HEAVY_BLOW_ARMOR_BROKEN_MULT)
                    self.log(f"{target.id} is armor-broken, heavy blow empowered")
            case _:
                logger.warning("Unknown targeted skill %r", skill_id)
                return 0
        self.log(f"uses {skill_id} on {target.id} for {damage}")
        target.take_damage(damage, source=self)
        return damage

    def use_self_skill(self, skill_id: SkillId) -> int:
        """Apply a self-targeted skill and return the amount restored."""
        if skill_id != Combat.HEAL_SELF:
            logger.warning("Unknown self skill %r", skill_id)
            return 0
        self._spend_skill(skill_id)
        before = self.health
        amount = self._rng.randint(*Combat.HEAL_AMOUNT)
        self.health = min(self.max_health, self.health + amount)
        self.log(f"heals to {self.health}")
        return self.health - before

    def idle(self) -> None:
        self.log("idles")
