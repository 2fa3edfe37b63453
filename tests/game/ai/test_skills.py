"""Tests for skill actions and the armor-break / heavy-blow combo."""

from __future__ import annotations

import pytest

from vanguard.constants.combat import CombatConstants as Combat
from vanguard.game.ai.skills import (
    ApplyArmorBreakAction,
    ExecuteHeavyBlowAction,
    HealSelfAction,
)
from vanguard.game.ai.utility import ActionCategory, ActionContext
from tests.helpers import make_agent, make_duel


class TestApplyArmorBreak:
    def test_contexts_carry_skill_and_respect_range(self) -> None:
        game_map, hero, enemy = make_duel(enemy_pos=(5, 2))
        far = make_agent("far", "blue", (6, 2))
        hero.visible_enemies.append(far)
        contexts = ApplyArmorBreakAction().generate_contexts(hero, game_map)
        assert [c.target for c in contexts] == [enemy]
        assert contexts[0].skill_id == Combat.ARMOR_BREAK

    def test_can_execute_gates(self) -> None:
        game_map, hero, enemy = make_duel()
        action = ApplyArmorBreakAction()
        ctx = ActionContext(hero, game_map, target=enemy)
        assert action.can_execute(hero, ctx)

        hero.mana = Combat.ARMOR_BREAK_MANA - 1
        assert not action.can_execute(hero, ctx)
        hero.mana = 100

        hero.cooldowns[Combat.ARMOR_BREAK] = 1
        assert not action.can_execute(hero, ctx)
        del hero.cooldowns[Combat.ARMOR_BREAK]

        enemy.position = (6, 2)
        assert not action.can_execute(hero, ctx)

    def test_execute_records_debuff_on_team_board(self) -> None:
        game_map, hero, enemy = make_duel()
        hero.current_turn = 4
        ApplyArmorBreakAction().execute(
            hero, ActionContext(hero, game_map, target=enemy)
        )
        record = hero.blackboard.get_debuff_info(enemy.id, Combat.ARMOR_BROKEN, 4)
        assert record is not None
        assert record.expires_turn == 4 + Combat.ARMOR_BREAK_DURATION_TURNS - 1
        assert hero.mana == 100 - Combat.ARMOR_BREAK_MANA
        assert not hero.is_skill_ready(Combat.ARMOR_BREAK)
        assert enemy.health < enemy.max_health

    def test_missed_target_records_nothing(self) -> None:
        game_map, hero, enemy = make_duel()
        ctx = ActionContext(hero, game_map, target=enemy)
        hero.visible_enemies = []
        ApplyArmorBreakAction().execute(hero, ctx)
        assert hero.blackboard.debuff_count() == 0
        assert hero.mana == 100

    def test_is_attack_class(self) -> None:
        assert ApplyArmorBreakAction().category is ActionCategory.ATTACK


class TestHeavyBlowCombo:
    def test_armor_broken_target_scores_higher(self) -> None:
        game_map, hero, enemy = make_duel()
        action = ExecuteHeavyBlowAction()
        ctx = ActionContext(hero, game_map, target=enemy)
        before = action.calculate_utility(hero, ctx)

        hero.blackboard.set_debuff(
            enemy.id, Combat.ARMOR_BROKEN, Combat.ARMOR_BREAK, 3, hero.current_turn
        )
        after = action.calculate_utility(hero, ctx)
        assert before == pytest.approx(2.1 / 3.8)
        assert after == pytest.approx(3.3 / 3.8)

    def test_teammate_setup_is_visible_through_shared_blackboard(self) -> None:
        game_map, breaker, enemy = make_duel()
        striker = make_agent("striker", "red", (3, 3), breaker.blackboard)
        striker.visible_enemies = [enemy]

        ApplyArmorBreakAction().execute(
            breaker, ActionContext(breaker, game_map, target=enemy)
        )

        ctx = ActionContext(striker, game_map, target=enemy)
        utility = ExecuteHeavyBlowAction().calculate_utility(striker, ctx)
        assert utility == pytest.approx(3.3 / 3.8, abs=0.05)

    def test_out_of_range(self) -> None:
        game_map, hero, enemy = make_duel(enemy_pos=(5, 2))
        action = ExecuteHeavyBlowAction()
        assert action.generate_contexts(hero, game_map) == []
        assert not action.can_execute(hero, ActionContext(hero, game_map, target=enemy))


class TestHealSelf:
    def test_requires_missing_health(self) -> None:
        game_map, hero, _ = make_duel()
        action = HealSelfAction()
        ctx = ActionContext(hero, game_map)
        assert not action.can_execute(hero, ctx)
        hero.health = 60
        assert action.can_execute(hero, ctx)
        hero.mana = Combat.HEAL_SELF_MANA - 1
        assert not action.can_execute(hero, ctx)

    def test_utility_grows_with_missing_health(self) -> None:
        game_map, hero, _ = make_duel(health=20)
        ctx = ActionContext(hero, game_map)
        assert HealSelfAction().calculate_utility(hero, ctx) == pytest.approx(2.8 / 3)

    def test_execute_heals_and_starts_cooldown(self) -> None:
        game_map, hero, _ = make_duel(health=20)
        HealSelfAction().execute(hero, ActionContext(hero, game_map))
        assert hero.health > 20
        assert not hero.is_skill_ready(Combat.HEAL_SELF)
        assert not HealSelfAction().has_context_generator
