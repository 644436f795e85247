"""
Experience and level-up rules.

A level-up fires whenever experience reaches the threshold: the surplus
carries over, the threshold grows by half, and stats increase by fixed
amounts. How much HP the level-up restores is a policy.
"""
from dataclasses import dataclass

from ..core.data import HealPolicy, Player


HP_PER_LEVEL = 20
ATTACK_PER_LEVEL = 3
DEFENSE_PER_LEVEL = 2
EXP_GROWTH = 1.5


@dataclass(frozen=True)
class LevelUpResult:
    """Stat changes from one level gained."""
    new_level: int
    hp_increase: int
    attack_increase: int
    defense_increase: int


def can_level_up(player: Player) -> bool:
    return player.exp >= player.exp_to_next


def level_up(player: Player, heal_policy: HealPolicy = HealPolicy.DELTA) -> LevelUpResult:
    """Apply exactly one level-up to the player in place.

    Raises:
        ValueError: If the player does not have enough experience
    """
    if not can_level_up(player):
        raise ValueError(
            f"{player.name} needs {player.exp_to_next} exp to level up, has {player.exp}"
        )

    player.level += 1
    player.exp -= player.exp_to_next
    player.exp_to_next = int(player.exp_to_next * EXP_GROWTH)

    player.max_hp += HP_PER_LEVEL
    if heal_policy is HealPolicy.FULL:
        player.hp = player.max_hp
    else:
        player.hp = min(player.max_hp, player.hp + HP_PER_LEVEL)
    player.attack += ATTACK_PER_LEVEL
    player.defense += DEFENSE_PER_LEVEL

    return LevelUpResult(
        new_level=player.level,
        hp_increase=HP_PER_LEVEL,
        attack_increase=ATTACK_PER_LEVEL,
        defense_increase=DEFENSE_PER_LEVEL,
    )


def apply_experience(
    player: Player,
    exp: int,
    heal_policy: HealPolicy = HealPolicy.DELTA
) -> list[LevelUpResult]:
    """Grant experience and resolve every level-up it triggers.

    Returns:
        One result per level gained, in order (empty when none fired)
    """
    player.exp += exp
    results = []
    while can_level_up(player):
        results.append(level_up(player, heal_policy))
    return results
