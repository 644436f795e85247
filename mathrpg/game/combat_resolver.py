"""
Combat resolution for the math battle.

This module computes damage for both sides of an exchange. Resolution is
pure: results describe what should happen and the battle manager applies
them, which keeps every formula testable on its own.
"""
from dataclasses import dataclass

import numpy as np

from ..core.data import Combatant, Enemy, MathProblem, Player


# Extra damage per difficulty point on a correct answer
DIFFICULTY_DAMAGE_BONUS = 5

# Difficulty ratings a problem can carry
DIFFICULTY_LEVELS = np.arange(1, 5, dtype=np.int32)


@dataclass(frozen=True)
class PlayerAttackResult:
    """Outcome of the player's answer."""
    correct: bool
    damage: int


@dataclass(frozen=True)
class EnemyAttackResult:
    """Outcome of the enemy's strike."""
    damage: int


class CombatResolver:
    """Damage formulas for player and enemy attacks."""

    @staticmethod
    def resolve_player_attack(
        player: Player,
        enemy: Enemy,
        problem: MathProblem,
        answer_given: int
    ) -> PlayerAttackResult:
        """
        Resolve the player's attack for a submitted answer.

        A wrong answer deals no damage. A right one deals the player's attack
        plus the difficulty bonus minus the enemy's defense, never below 1.
        """
        correct = answer_given == problem.answer
        if not correct:
            return PlayerAttackResult(correct=False, damage=0)

        damage = max(1, player.attack + problem.difficulty * DIFFICULTY_DAMAGE_BONUS - enemy.defense)
        return PlayerAttackResult(correct=True, damage=damage)

    @staticmethod
    def resolve_enemy_attack(enemy: Enemy, player: Player) -> EnemyAttackResult:
        """Resolve the enemy's strike. Always deals at least 1 damage."""
        return EnemyAttackResult(damage=max(1, enemy.attack - player.defense))

    @staticmethod
    def apply_damage(target: Combatant, damage: int) -> int:
        """Apply resolved damage to a combatant. Returns remaining HP."""
        return target.take_damage(damage)

    @staticmethod
    def forecast_player_damage(player: Player, enemy: Enemy) -> dict[int, int]:
        """
        Damage a correct answer would deal at every difficulty.

        Returns:
            Mapping of difficulty (1-4) to damage against this enemy
        """
        damages = np.maximum(
            1, player.attack + DIFFICULTY_LEVELS * DIFFICULTY_DAMAGE_BONUS - enemy.defense
        )
        return {int(difficulty): int(damage) for difficulty, damage in zip(DIFFICULTY_LEVELS, damages)}
