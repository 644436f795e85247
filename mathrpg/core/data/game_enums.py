"""Centralized game enums and constants.

This module contains all core game enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto


class ProblemType(Enum):
    """Kinds of math challenges the generator can produce."""
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"
    MIXED = "mixed"


class ItemType(Enum):
    """Shop item categories."""
    POTION = "potion"
    WEAPON = "weapon"
    ARMOR = "armor"


class HealPolicy(Enum):
    """How much HP a level-up restores."""
    DELTA = "delta"  # Heal by the max HP increase only
    FULL = "full"    # Restore to the new max HP


class ErrorKind(Enum):
    """Domain failures delivered as outcomes instead of exceptions."""
    INVALID_COMMAND = "invalid_command"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_ITEM = "unknown_item"
    MALFORMED_SNAPSHOT = "malformed_snapshot"


class CommandType(Enum):
    """Commands the presentation layer can send to a battle."""
    SUBMIT_ANSWER = auto()
    PURCHASE_ITEM = auto()
    CLOSE_SHOP = auto()


# Difficulty rating per problem type, doubles as the damage bonus multiplier
PROBLEM_DIFFICULTY = {
    ProblemType.ADDITION: 1,
    ProblemType.SUBTRACTION: 1,
    ProblemType.MULTIPLICATION: 2,
    ProblemType.DIVISION: 3,
    ProblemType.MIXED: 4,
}
