"""Tests for experience and level-up rules."""

import pytest

from mathrpg.core.data import HealPolicy
from mathrpg.game.progression import apply_experience, can_level_up, level_up


class TestLevelUp:

    def test_level_up_at_threshold(self, builder):
        """90/100 exp plus 20 exp levels up with 10 carried over."""
        player = builder.player(exp=90, exp_to_next=100, hp=60)

        results = apply_experience(player, 20)

        assert len(results) == 1
        assert player.level == 2
        assert player.exp == 10
        assert player.exp_to_next == 150
        assert player.max_hp == 120
        assert player.hp == 80
        assert player.attack == 18
        assert player.defense == 10
        assert results[0].new_level == 2
        assert (results[0].hp_increase, results[0].attack_increase, results[0].defense_increase) == (20, 3, 2)

    def test_no_level_up_below_threshold(self, builder):
        player = builder.player(exp=0, exp_to_next=100)

        assert apply_experience(player, 99) == []
        assert player.level == 1
        assert player.exp == 99

    def test_multiple_levels_from_one_reward(self, builder):
        player = builder.player(exp=0, exp_to_next=100)

        results = apply_experience(player, 300)

        # 100 -> level 2 (150 next), 150 -> level 3 (225 next), 50 left
        assert [r.new_level for r in results] == [2, 3]
        assert player.exp == 50
        assert player.exp_to_next == 225

    def test_threshold_growth_truncates(self, builder):
        player = builder.player(exp=225, exp_to_next=225)
        level_up(player)
        assert player.exp_to_next == 337

    def test_full_heal_policy(self, builder):
        player = builder.player(exp=100, hp=10)

        apply_experience(player, 0, HealPolicy.FULL)

        assert player.hp == player.max_hp == 120

    def test_delta_heal_never_exceeds_max(self, builder):
        player = builder.player(exp=100, hp=100)
        apply_experience(player, 0, HealPolicy.DELTA)
        assert player.hp == 120

    def test_level_up_requires_enough_exp(self, builder):
        player = builder.player(exp=10)
        assert not can_level_up(player)
        with pytest.raises(ValueError):
            level_up(player)
