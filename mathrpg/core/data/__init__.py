"""Core data structures and definitions.

This package contains fundamental data types and game definitions:
- data_structures.py: Combatants, math problems, shop items and presentation snapshots
- game_enums.py: Centralized enums for problem types, item types, policies and errors
"""

from .data_structures import (
    Combatant,
    DataConverter,
    Enemy,
    EnemyArchetype,
    EnemySnapshot,
    ItemEffect,
    MathProblem,
    Player,
    PlayerSnapshot,
    Rewards,
    ShopItem,
    ValidationMixin,
)
from .game_enums import (
    CommandType,
    ErrorKind,
    HealPolicy,
    ItemType,
    ProblemType,
    PROBLEM_DIFFICULTY,
)

__all__ = [
    "Combatant",
    "DataConverter",
    "Enemy",
    "EnemyArchetype",
    "EnemySnapshot",
    "ItemEffect",
    "MathProblem",
    "Player",
    "PlayerSnapshot",
    "Rewards",
    "ShopItem",
    "ValidationMixin",
    "CommandType",
    "ErrorKind",
    "HealPolicy",
    "ItemType",
    "ProblemType",
    "PROBLEM_DIFFICULTY",
]
