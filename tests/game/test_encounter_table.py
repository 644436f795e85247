"""Tests for encounter selection."""

import pytest

from mathrpg.game.encounter_table import EncounterTable


class TestEncounterTable:

    @pytest.mark.parametrize("battle_number, name, is_boss", [
        (1, "Goblin", False),
        (2, "Goblin", False),
        (3, "Goblin King", True),
        (4, "Orc", False),
        (5, "Orc", False),
        (6, "Orc Chieftain", True),
        (7, "Troll", False),
        (9, "Ancient Troll", True),
        (10, "Dragon", False),
        (12, "Elder Dragon", True),
    ])
    def test_standard_progression(self, encounter_table, battle_number, name, is_boss):
        enemy = encounter_table.next_encounter(battle_number)
        assert enemy.name == name
        assert enemy.is_boss == is_boss

    def test_battle_three_is_first_boss(self, encounter_table):
        """Battle 3 is a tier 1 boss drawn from boss index 0."""
        assert EncounterTable.is_boss_battle(3)
        assert EncounterTable.tier_for(3) == 1
        assert encounter_table.archetype_for(3) is encounter_table.bosses[0]

    def test_tiers_beyond_catalog_reuse_strongest(self, encounter_table):
        assert encounter_table.next_encounter(40).name == "Dragon"
        assert encounter_table.next_encounter(42).name == "Elder Dragon"

    def test_spawned_at_full_health(self, encounter_table):
        enemy = encounter_table.next_encounter(6)
        assert enemy.hp == enemy.max_hp == 120

    def test_invalid_battle_number(self, encounter_table):
        with pytest.raises(ValueError):
            encounter_table.next_encounter(0)

    def test_empty_catalog_rejected(self, builder):
        regular, _ = builder.archetypes()
        with pytest.raises(ValueError):
            EncounterTable(regular, [])
