"""Tests for the concrete considerations."""

from __future__ import annotations

import pytest

from vanguard.constants.combat import CombatConstants as Combat
from vanguard.game.ai.considerations import (
    ClearDefendersAtGoalConsideration,
    DestinationChaseFocusTargetConsideration,
    DestinationProximityToObjectiveConsideration,
    DestinationSafetyConsideration,
    DistanceConsideration,
    HealthConsideration,
    IsTeamFocusTargetConsideration,
    ManaConsideration,
    ProximityToGoalPositionConsideration,
    SkillReadyConsideration,
    StayPutConsideration,
    TargetHasSetupDebuffConsideration,
    TargetUnderAttackConsideration,
)
from vanguard.game.ai.utility import ActionContext
from vanguard.game.blackboard import GlobalGoalType, GlobalObjective
from tests.helpers import make_duel, make_wall_map


def _target_context(enemy_pos=(3, 2), **hero_kwargs) -> ActionContext:
    game_map, hero, enemy = make_duel(enemy_pos=enemy_pos, **hero_kwargs)
    return ActionContext(hero, game_map, target=enemy)


def _destination_context(destination, enemy_pos=(3, 2)) -> ActionContext:
    game_map, hero, _ = make_duel(enemy_pos=enemy_pos)
    return ActionContext(hero, game_map, destination=destination)


def _add_capture_point(ctx: ActionContext, point=(5, 5)) -> None:
    ctx.agent.blackboard.add_objective(
        GlobalObjective(GlobalGoalType.CAPTURE_POINT, 0.8, point)
    )


class TestBasic:
    @pytest.mark.parametrize(
        ("enemy_pos", "expected"),
        [((3, 2), 1.0), ((4, 2), 0.5), ((5, 2), 0.0), ((6, 2), 0.0)],
    )
    def test_distance_falloff(self, enemy_pos, expected: float) -> None:
        ctx = _target_context(enemy_pos)
        assert DistanceConsideration(1, 3).score(ctx) == pytest.approx(expected)

    def test_distance_without_target_or_path(self) -> None:
        ctx = _target_context()
        assert DistanceConsideration(1, 3).score(ctx.with_(target=None)) == 0.0

        walled = make_wall_map()
        ctx = ctx.with_(game_map=walled)
        ctx.agent.position = (0, 0)
        ctx.target.position = (1, 2)
        assert DistanceConsideration(1, 10).score(ctx) == 0.0

    def test_self_health_low_is_better(self) -> None:
        ctx = _target_context(health=25)
        assert HealthConsideration(True, True).score(ctx) == pytest.approx(0.75)
        assert HealthConsideration(True, False).score(ctx) == pytest.approx(0.25)

    @pytest.mark.parametrize("max_health", [50, 100, 200])
    def test_self_health_uses_own_max_health(self, max_health: int) -> None:
        ctx = _target_context(health=max_health // 4, max_health=max_health)
        assert HealthConsideration(True, True).score(ctx) == pytest.approx(0.75)

    def test_target_health(self) -> None:
        ctx = _target_context()
        ctx.target.health = 60
        score = HealthConsideration(False, True, max_health=120).score(ctx)
        assert score == pytest.approx(0.5)

    @pytest.mark.parametrize("is_low_better", [True, False])
    def test_target_health_without_target_scores_zero(self, is_low_better) -> None:
        ctx = _target_context().with_(target=None)
        assert HealthConsideration(False, is_low_better).score(ctx) == 0.0

    def test_mana_threshold(self) -> None:
        assert ManaConsideration(20).score(_target_context(mana=20)) == 1.0
        assert ManaConsideration(20).score(_target_context(mana=19)) == 0.0

    def test_skill_ready(self) -> None:
        ctx = _target_context()
        consideration = SkillReadyConsideration(Combat.HEAL_SELF)
        assert consideration.score(ctx) == 1.0
        ctx.agent.cooldowns[Combat.HEAL_SELF] = 1
        assert consideration.score(ctx) == 0.0


class TestTeamwork:
    def test_focus_bonus_saturates(self) -> None:
        ctx = _target_context()
        consideration = IsTeamFocusTargetConsideration(if_focus=1.5, if_not_focus=0.5)
        assert consideration.score(ctx) == 0.5
        ctx.agent.blackboard.set_focus_target(ctx.target.id)
        assert consideration.score(ctx) == 1.0
        assert consideration.score(ctx.with_(target=None)) == 0.5

    def test_target_under_attack(self) -> None:
        ctx = _target_context()
        ctx.target.health = 60
        assert TargetUnderAttackConsideration(120).score(ctx) == pytest.approx(0.5)
        assert TargetUnderAttackConsideration(120).score(ctx.with_(target=None)) == 0

    def test_setup_debuff(self) -> None:
        ctx = _target_context()
        hero = ctx.agent
        consideration = TargetHasSetupDebuffConsideration(Combat.ARMOR_BROKEN, 1.2)
        assert consideration.score(ctx) == 0.0

        hero.blackboard.set_debuff(
            ctx.target.id, Combat.ARMOR_BROKEN, Combat.ARMOR_BREAK, 3, 0
        )
        assert consideration.score(ctx) == 1.0

    def test_setup_debuff_min_remaining_turns(self) -> None:
        ctx = _target_context()
        hero = ctx.agent
        hero.blackboard.set_debuff(
            ctx.target.id, Combat.ARMOR_BROKEN, Combat.ARMOR_BREAK, 3, 10
        )
        consideration = TargetHasSetupDebuffConsideration(
            Combat.ARMOR_BROKEN, 1.0, min_remaining_turns=2
        )
        hero.current_turn = 10
        assert consideration.score(ctx) == 1.0
        hero.current_turn = 11
        assert consideration.score(ctx) == 0.0


class TestMovement:
    def test_safety(self) -> None:
        near = _destination_context((0, 2))
        assert DestinationSafetyConsideration(5).score(near) == pytest.approx(0.6)
        far = _destination_context((9, 9), enemy_pos=(0, 0))
        assert DestinationSafetyConsideration(5).score(far) == 1.0

    def test_safety_scales_with_enemy_health(self) -> None:
        ctx = _destination_context((0, 2))
        ctx.agent.visible_enemies[0].health = 50
        assert DestinationSafetyConsideration(5).score(ctx) == pytest.approx(0.8)

    def test_safety_without_enemies(self) -> None:
        ctx = _destination_context((0, 2))
        ctx.agent.visible_enemies = []
        assert DestinationSafetyConsideration().score(ctx) == 1.0
        assert DestinationSafetyConsideration().score(ctx.with_(destination=None)) == 0

    def test_proximity_to_objective(self) -> None:
        consideration = DestinationProximityToObjectiveConsideration(
            GlobalGoalType.CAPTURE_POINT
        )
        ctx = _destination_context((5, 5))
        assert consideration.score(ctx) == pytest.approx(0.1)

        _add_capture_point(ctx)
        assert consideration.score(ctx) == 1.0
        assert consideration.score(ctx.with_(destination=(5, 15))) == pytest.approx(0.5)

    def test_proximity_ignores_other_objective_types(self) -> None:
        consideration = DestinationProximityToObjectiveConsideration(
            GlobalGoalType.DEFEND_POINT
        )
        ctx = _destination_context((5, 5))
        _add_capture_point(ctx)
        assert consideration.score(ctx) == pytest.approx(0.1)

    def test_chase_focus_target(self) -> None:
        consideration = DestinationChaseFocusTargetConsideration(max_chase=10)
        ctx = _destination_context((2, 2))
        assert consideration.score(ctx) == pytest.approx(0.1)

        ctx.agent.blackboard.set_focus_target("enemy")
        assert consideration.score(ctx) == 1.0
        farther = ctx.with_(destination=(3, 8))
        assert consideration.score(farther) == pytest.approx(1 - 4.5 / 8.5)

    def test_chase_focus_target_not_visible(self) -> None:
        ctx = _destination_context((2, 2))
        ctx.agent.blackboard.set_focus_target("someone-else")
        assert DestinationChaseFocusTargetConsideration().score(ctx) == 0.1

    def test_stay_put(self) -> None:
        ctx = _destination_context((2, 2))
        assert StayPutConsideration(0.2).score(ctx) == 0.2
        assert StayPutConsideration(0.2).score(ctx.with_(destination=(1, 1))) == 0.0


class TestObjective:
    def test_proximity_to_goal(self) -> None:
        consideration = ProximityToGoalPositionConsideration(
            GlobalGoalType.CAPTURE_POINT, max_distance=20
        )
        ctx = _target_context()
        assert consideration.score(ctx) == pytest.approx(0.1)
        _add_capture_point(ctx, (2, 12))
        assert consideration.score(ctx) == pytest.approx(0.5)

    def test_clear_defenders(self) -> None:
        consideration = ClearDefendersAtGoalConsideration(GlobalGoalType.CAPTURE_POINT)
        ctx = _target_context()
        ctx.target.health = 40
        assert consideration.score(ctx) == pytest.approx(0.05)

        _add_capture_point(ctx, (4, 2))
        assert consideration.score(ctx) == pytest.approx(0.48)

        ctx.agent.blackboard.clear_objectives()
        _add_capture_point(ctx, (9, 9))
        assert consideration.score(ctx) == pytest.approx(0.1)
        assert consideration.score(ctx.with_(target=None)) == 0.0
