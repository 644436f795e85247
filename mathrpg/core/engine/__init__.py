"""Core battle engine components.

This package contains the fundamental engine systems:
- game_state.py: Battle session state, phases and cumulative statistics
- scheduler.py: One-shot delayed callbacks for pacing between phases
"""

from .game_state import BattleSession, BattleState, SessionPhase, SessionStats, TERMINAL_PHASES
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, SchedulerEntry

__all__ = [
    "BattleSession",
    "BattleState",
    "SessionPhase",
    "SessionStats",
    "TERMINAL_PHASES",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "SchedulerEntry",
]
