"""Unified data structures and conversion utilities.

This module provides clear definitions and conversion utilities for the different
data representations used throughout the battle architecture.

Data Flow:
1. EnemyArchetype (catalog) -> Enemy (battle logic) -> EnemySnapshot (presentation)
2. Player (battle logic) -> PlayerSnapshot (presentation)

Battle logic owns the mutable Player/Enemy; the presentation layer only ever
receives the frozen snapshot copies.
"""

from dataclasses import dataclass, field
from typing import Optional

from .game_enums import ItemType, ProblemType


class ValidationMixin:
    """Mixin providing invariant checks for combatant-shaped data."""

    def validate_stats(self) -> list[str]:
        """Return a list of violated invariants (empty when valid)."""
        errors = []
        for name in ("hp", "max_hp", "attack", "defense"):
            value = getattr(self, name, None)
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"{name} must be an integer")
            elif value < 0:
                errors.append(f"{name} must be non-negative")
        if errors:
            return errors

        if getattr(self, "max_hp") <= 0:
            errors.append("max_hp must be positive")
        if getattr(self, "hp") > getattr(self, "max_hp"):
            errors.append("hp cannot exceed max_hp")
        return errors


@dataclass
class Combatant(ValidationMixin):
    """Shared shape of anything that fights."""
    name: str
    hp: int
    max_hp: int
    attack: int
    defense: int

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def take_damage(self, damage: int) -> int:
        """Apply damage, flooring HP at zero. Returns the new HP."""
        self.hp = max(0, self.hp - damage)
        return self.hp


@dataclass
class Player(Combatant):
    """The player's hero, created once per session."""
    level: int
    exp: int
    exp_to_next: int
    gold: int


@dataclass(frozen=True)
class Rewards:
    """Experience and gold granted for defeating an enemy."""
    exp: int = 0
    gold: int = 0


@dataclass
class Enemy(Combatant):
    """An opponent, spawned fresh for every encounter."""
    rewards: Rewards = field(default_factory=Rewards)
    is_boss: bool = False


@dataclass(frozen=True)
class EnemyArchetype:
    """Catalog entry an Enemy is spawned from."""
    name: str
    hp: int
    attack: int
    defense: int
    exp: int
    gold: int

    def spawn(self, is_boss: bool) -> Enemy:
        """Create a fresh, full-health enemy from this archetype."""
        return Enemy(
            name=self.name,
            hp=self.hp,
            max_hp=self.hp,
            attack=self.attack,
            defense=self.defense,
            rewards=Rewards(exp=self.exp, gold=self.gold),
            is_boss=is_boss,
        )


@dataclass(frozen=True)
class MathProblem:
    """A single math challenge presented on the player's turn."""
    question: str
    answer: int
    difficulty: int
    type: ProblemType
    options: Optional[tuple[int, ...]] = None


@dataclass(frozen=True)
class ItemEffect:
    """Stat changes applied when an item is bought."""
    hp: Optional[int] = None
    attack: Optional[int] = None
    defense: Optional[int] = None


@dataclass(frozen=True)
class ShopItem:
    """Static shop catalog entry."""
    id: str
    name: str
    type: ItemType
    cost: int
    effect: ItemEffect
    description: str


@dataclass(frozen=True)
class PlayerSnapshot:
    """Read-only copy of the player for the presentation layer."""
    name: str
    hp: int
    max_hp: int
    attack: int
    defense: int
    level: int
    exp: int
    exp_to_next: int
    gold: int


@dataclass(frozen=True)
class EnemySnapshot:
    """Read-only copy of the current enemy for the presentation layer."""
    name: str
    hp: int
    max_hp: int
    attack: int
    defense: int
    is_boss: bool


class DataConverter:
    """Converts battle-owned objects into presentation-safe snapshots."""

    @staticmethod
    def player_to_snapshot(player: Player) -> PlayerSnapshot:
        return PlayerSnapshot(
            name=player.name,
            hp=player.hp,
            max_hp=player.max_hp,
            attack=player.attack,
            defense=player.defense,
            level=player.level,
            exp=player.exp,
            exp_to_next=player.exp_to_next,
            gold=player.gold,
        )

    @staticmethod
    def enemy_to_snapshot(enemy: Optional[Enemy]) -> Optional[EnemySnapshot]:
        if enemy is None:
            return None
        return EnemySnapshot(
            name=enemy.name,
            hp=enemy.hp,
            max_hp=enemy.max_hp,
            attack=enemy.attack,
            defense=enemy.defense,
            is_boss=enemy.is_boss,
        )

