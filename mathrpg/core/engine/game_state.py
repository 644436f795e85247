"""Battle session state with structured substates.

This module defines the top-level :class:`BattleSession` along with the
phase enums and the cumulative statistics that feed save snapshots and
achievements. The session is owned by the battle manager; other code only
sees snapshots of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from ..data import Enemy, Player


class SessionPhase(Enum):
    """High level session phases."""

    READY = auto()       # Created, waiting for start()
    ACTIVE = auto()      # Battles in progress
    COMPLETED = auto()   # Won or lost; completion callback fired
    CANCELLED = auto()   # Exited by the host before completion


class BattleState(Enum):
    """States of the turn-based battle loop."""

    PLAYER_TURN = auto()     # About to present a challenge
    WAITING_ANSWER = auto()  # Challenge shown, waiting for submit-answer
    ENEMY_TURN = auto()      # Enemy strike pending or resolving
    VICTORY = auto()         # Enemy defeated (or the whole run won)
    SHOPPING = auto()        # Shop open, waiting for purchases / close-shop
    DEFEAT = auto()          # Player defeated, terminal


TERMINAL_PHASES = (SessionPhase.COMPLETED, SessionPhase.CANCELLED)


@dataclass
class SessionStats:
    """Cumulative statistics across the whole run."""

    problems_attempted: int = 0
    problems_correct: int = 0
    enemies_defeated: int = 0
    bosses_defeated: int = 0
    highest_difficulty_completed: int = 0
    inventory: list[str] = field(default_factory=list)

    @property
    def accuracy(self) -> int:
        """Percentage of problems answered correctly, rounded."""
        if self.problems_attempted == 0:
            return 0
        return round(self.problems_correct / self.problems_attempted * 100)

    def record_answer(self, correct: bool, difficulty: int) -> None:
        self.problems_attempted += 1
        if correct:
            self.problems_correct += 1
            self.highest_difficulty_completed = max(
                self.highest_difficulty_completed, difficulty
            )

    def record_kill(self, is_boss: bool) -> None:
        self.enemies_defeated += 1
        if is_boss:
            self.bosses_defeated += 1


@dataclass
class BattleSession:
    """Everything one run of the battle engine owns."""

    player: Player
    max_battles: int
    battle_number: int = 1
    enemy: Optional[Enemy] = None
    state: BattleState = BattleState.PLAYER_TURN
    phase: SessionPhase = SessionPhase.READY
    stats: SessionStats = field(default_factory=SessionStats)
    play_time_offset: int = 0  # Seconds carried over from a restored save

    @property
    def is_final_battle_won(self) -> bool:
        return self.battle_number > self.max_battles

    @property
    def is_over(self) -> bool:
        return self.phase in TERMINAL_PHASES
