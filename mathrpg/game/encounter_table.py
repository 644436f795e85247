"""
Encounter selection by battle number.

Every third battle is a boss. The tier grows by one every three battles and
picks an archetype from the regular or boss catalog; tiers past the end of a
catalog keep reusing its strongest entry.
"""
from typing import Sequence

from ..core.data import Enemy, EnemyArchetype


BOSS_INTERVAL = 3


class EncounterTable:
    """Picks the enemy for each battle from ordered archetype catalogs."""

    def __init__(
        self,
        regular: Sequence[EnemyArchetype],
        bosses: Sequence[EnemyArchetype]
    ):
        if not regular or not bosses:
            raise ValueError("Encounter table needs at least one regular and one boss archetype")
        self.regular = tuple(regular)
        self.bosses = tuple(bosses)

    @staticmethod
    def is_boss_battle(battle_number: int) -> bool:
        return battle_number % BOSS_INTERVAL == 0

    @staticmethod
    def tier_for(battle_number: int) -> int:
        return battle_number // BOSS_INTERVAL

    def archetype_for(self, battle_number: int) -> EnemyArchetype:
        """Catalog entry used for a battle number."""
        tier = self.tier_for(battle_number)
        if self.is_boss_battle(battle_number):
            return self.bosses[max(0, min(tier - 1, len(self.bosses) - 1))]
        return self.regular[min(tier, len(self.regular) - 1)]

    def next_encounter(self, battle_number: int) -> Enemy:
        """Spawn a full-health enemy for the given battle number."""
        if battle_number < 1:
            raise ValueError(f"battle_number must be at least 1, got {battle_number}")
        archetype = self.archetype_for(battle_number)
        return archetype.spawn(is_boss=self.is_boss_battle(battle_number))
