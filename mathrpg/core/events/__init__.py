"""Event system for publisher-subscriber communication.

This package contains the complete event-driven architecture:
- event_manager.py: Publisher-subscriber event routing and coordination
- events.py: Event definitions for battle-to-presentation communication
"""

from .event_manager import EventManager, EventPriority, QueuedEvent
from .events import (
    GameEvent,
    EventType,
    BattleStarted,
    BattleStateChanged,
    ChallengeOpened,
    HudUpdate,
    CombatResult,
    EnemyAttacked,
    EnemyDefeated,
    PlayerDefeated,
    LevelUp,
    ShopOpened,
    ItemPurchased,
    PurchaseRejected,
    GameCompleted,
    LogMessage,
)

__all__ = [
    "EventManager",
    "EventPriority",
    "QueuedEvent",
    "GameEvent",
    "EventType",
    "BattleStarted",
    "BattleStateChanged",
    "ChallengeOpened",
    "HudUpdate",
    "CombatResult",
    "EnemyAttacked",
    "EnemyDefeated",
    "PlayerDefeated",
    "LevelUp",
    "ShopOpened",
    "ItemPurchased",
    "PurchaseRejected",
    "GameCompleted",
    "LogMessage",
]
