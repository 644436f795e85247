"""Tests for battle configuration loading."""

import pytest

from mathrpg.core.data import HealPolicy
from mathrpg.game.battle_config import BattleConfig, BattleConfigLoader


class TestBattleConfig:

    def test_defaults(self):
        config = BattleConfig()
        player = config.create_player()

        assert config.max_battles == 10
        assert config.shop_every_n_battles == 4
        assert (config.battle_start_delay_ms, config.result_display_delay_ms,
                config.enemy_attack_display_delay_ms, config.victory_display_delay_ms) == (1000, 2000, 2000, 3000)
        assert config.heal_policy is HealPolicy.DELTA
        assert (player.name, player.hp, player.attack, player.defense, player.gold) == ("Hero", 100, 15, 8, 50)
        assert config.validate() == []

    def test_each_player_is_fresh(self):
        config = BattleConfig()
        first = config.create_player()
        first.gold = 0
        assert config.create_player().gold == 50


class TestBattleConfigLoader:

    def test_packaged_config_matches_defaults(self):
        loader = BattleConfigLoader()
        assert loader.load() == BattleConfig()
        assert loader.warnings == []

    def test_missing_file_falls_back_with_warning(self, tmp_path):
        loader = BattleConfigLoader(str(tmp_path / "nope.yaml"))

        assert loader.load() == BattleConfig()
        assert len(loader.warnings) == 1

    def test_overrides_and_unknown_keys(self, tmp_path):
        path = tmp_path / "battle_config.yaml"
        path.write_text(
            "config:\n"
            "  max_battles: 5\n"
            "  heal_policy: FULL\n"
            "  surprise: true\n"
            "delays:\n"
            "  victory_display: 0\n"
            "starting_player:\n"
            "  name: Ada\n"
            "  max_hp: 80\n"
        )

        config = BattleConfigLoader(str(path)).load()

        assert config.max_battles == 5
        assert config.heal_policy is HealPolicy.FULL
        assert config.victory_display_delay_ms == 0
        assert config.result_display_delay_ms == 2000
        player = config.create_player()
        assert (player.name, player.hp, player.max_hp) == ("Ada", 80, 80)

    @pytest.mark.parametrize("data", [
        {"config": {"max_battles": 0}},
        {"config": {"heal_policy": "sometimes"}},
        {"config": {"multiple_choice": "yes"}},
        {"config": {"option_count": 1}},
        {"delays": {"result_display": -1}},
        {"starting_player": {"hp": 200}},
        {"starting_player": "Hero"},
        {"delays": [1, 2]},
    ])
    def test_invalid_values(self, data):
        with pytest.raises(ValueError):
            BattleConfigLoader().parse(data)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "battle_config.yaml"
        path.write_text("config: {max_battles: [\n")
        with pytest.raises(ValueError):
            BattleConfigLoader(str(path)).load()
