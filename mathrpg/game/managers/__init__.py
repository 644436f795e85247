"""Manager systems for battle logic coordination.

This package contains the manager classes that coordinate the battle
through the event-driven architecture:
- battle_manager.py: Battle state machine and command handling
- log_manager.py: Event-driven log buffer with filtering
- presentation_bridge.py: Wire-level events and commands for a presentation layer
"""

from .battle_manager import BattleManager, BattleTransitionRule, BattleTrigger
from .log_manager import LogCategory, LogEntry, LogLevel, LogManager
from .presentation_bridge import PresentationBridge, marshal_event, parse_command

__all__ = [
    "BattleManager",
    "BattleTransitionRule",
    "BattleTrigger",
    "LogCategory",
    "LogEntry",
    "LogLevel",
    "LogManager",
    "PresentationBridge",
    "marshal_event",
    "parse_command",
]
