"""Event-driven battle events.

This module defines every event the battle engine publishes. The presentation
layer subscribes to these; nothing in here carries a mutable reference to the
battle's own Player or Enemy.

Event Design Principles:
- Events are immutable dataclasses with snapshot payloads
- All events include the battle number they were raised in
- Events use proper enums instead of magic strings
- The EventType enum is closed: one member per event class
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING
from abc import ABC
from enum import Enum, auto

from ..data import ErrorKind

if TYPE_CHECKING:
    from ..data import EnemySnapshot, ItemEffect, MathProblem, PlayerSnapshot, ShopItem
    from ..engine.game_state import BattleState


class EventType(Enum):
    """Types of battle events that listeners can subscribe to."""
    # Battle flow
    BATTLE_STARTED = auto()
    BATTLE_STATE_CHANGED = auto()
    CHALLENGE_OPENED = auto()
    HUD_UPDATE = auto()

    # Combat
    COMBAT_RESULT = auto()
    ENEMY_ATTACKED = auto()
    ENEMY_DEFEATED = auto()
    PLAYER_DEFEATED = auto()

    # Progression
    LEVEL_UP = auto()

    # Shop
    SHOP_OPENED = auto()
    ITEM_PURCHASED = auto()
    PURCHASE_REJECTED = auto()

    # Session
    GAME_COMPLETED = auto()

    # Logging
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all battle events."""
    battle_number: int
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class BattleStarted(GameEvent):
    """Event emitted when a new enemy has been spawned."""
    max_battles: int
    enemy_snapshot: "EnemySnapshot"

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.BATTLE_STARTED)


@dataclass(frozen=True)
class BattleStateChanged(GameEvent):
    """Event emitted whenever the battle state machine transitions."""
    old_state: "BattleState"
    new_state: "BattleState"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.BATTLE_STATE_CHANGED)


@dataclass(frozen=True)
class ChallengeOpened(GameEvent):
    """Event emitted when a math problem is presented to the player."""
    problem: "MathProblem"
    enemy_snapshot: "EnemySnapshot"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CHALLENGE_OPENED)


@dataclass(frozen=True)
class HudUpdate(GameEvent):
    """Event emitted when player or enemy stats change."""
    player_snapshot: "PlayerSnapshot"
    enemy_snapshot: Optional["EnemySnapshot"]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.HUD_UPDATE)


@dataclass(frozen=True)
class CombatResult(GameEvent):
    """Event emitted after the player's answer has been resolved."""
    success: bool
    damage: int
    message: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_RESULT)


@dataclass(frozen=True)
class EnemyAttacked(GameEvent):
    """Event emitted after the enemy strikes the player."""
    damage: int
    enemy_name: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ENEMY_ATTACKED)


@dataclass(frozen=True)
class EnemyDefeated(GameEvent):
    """Event emitted when the current enemy reaches 0 HP."""
    name: str
    exp: int
    gold: int
    is_boss: bool

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ENEMY_DEFEATED)


@dataclass(frozen=True)
class PlayerDefeated(GameEvent):
    """Event emitted when the player reaches 0 HP."""
    final_score: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.PLAYER_DEFEATED)


@dataclass(frozen=True)
class LevelUp(GameEvent):
    """Event emitted once per level gained."""
    new_level: int
    hp_increase: int
    attack_increase: int
    defense_increase: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LEVEL_UP)


@dataclass(frozen=True)
class ShopOpened(GameEvent):
    """Event emitted when the shop becomes available between battles."""
    items: tuple["ShopItem", ...]
    gold: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.SHOP_OPENED)


@dataclass(frozen=True)
class ItemPurchased(GameEvent):
    """Event emitted after a successful purchase."""
    item_name: str
    effect: "ItemEffect"

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ITEM_PURCHASED)


@dataclass(frozen=True)
class PurchaseRejected(GameEvent):
    """Event emitted when a purchase is denied."""
    item_id: str
    reason: ErrorKind
    gold: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.PURCHASE_REJECTED)


@dataclass(frozen=True)
class GameCompleted(GameEvent):
    """Event emitted once when the session is won or lost."""
    victory: bool
    final_score: int
    achievements: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.GAME_COMPLETED)


@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: str
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)
