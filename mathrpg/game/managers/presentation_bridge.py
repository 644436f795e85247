"""
Wire marshalling between the battle engine and a presentation layer.

The bridge owns no game logic. Outgoing, it turns typed events into
(name, payload) pairs using kebab-case event names and camelCase payload
keys. Incoming, it parses (name, payload) commands into typed Command
objects and hands them to the battle manager. Anything it cannot parse is
logged and rejected.
"""
import numbers
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

from ...core.data import ItemEffect
from ...core.events import EventType, GameEvent, LogMessage
from ...core.input_system import CloseShop, Command, PurchaseItem, SubmitAnswer

if TYPE_CHECKING:
    from ...core.events.event_manager import EventManager
    from .battle_manager import BattleManager


WireListener = Callable[[str, dict[str, Any]], None]

EVENT_NAMES = {
    EventType.BATTLE_STARTED: "battle-started",
    EventType.BATTLE_STATE_CHANGED: "battle-state-changed",
    EventType.CHALLENGE_OPENED: "challenge-opened",
    EventType.HUD_UPDATE: "hud-update",
    EventType.COMBAT_RESULT: "combat-result",
    EventType.ENEMY_ATTACKED: "enemy-attacked",
    EventType.ENEMY_DEFEATED: "enemy-defeated",
    EventType.PLAYER_DEFEATED: "player-defeated",
    EventType.LEVEL_UP: "level-up",
    EventType.SHOP_OPENED: "shop-opened",
    EventType.ITEM_PURCHASED: "item-purchased",
    EventType.PURCHASE_REJECTED: "purchase-rejected",
    EventType.GAME_COMPLETED: "game-completed",
}

COMMAND_NAMES = ("submit-answer", "purchase-item", "close-shop")

# Events whose payload keeps the battle number
BATTLE_NUMBER_EVENTS = {EventType.BATTLE_STARTED}


def to_camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_wire(value: Any) -> Any:
    """Convert a payload value into plain data: dicts, lists, strings and numbers."""
    if isinstance(value, Enum):
        return value.value if isinstance(value.value, str) else value.name.lower()

    if is_dataclass(value) and not isinstance(value, type):
        data = {}
        for f in fields(value):
            item = getattr(value, f.name)
            # Effects only list the stats they change
            if item is None and isinstance(value, ItemEffect):
                continue
            data[to_camel_case(f.name)] = to_wire(item)
        return data

    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]

    if isinstance(value, dict):
        return {str(key): to_wire(item) for key, item in value.items()}

    return value


def marshal_event(event: GameEvent) -> tuple[str, dict[str, Any]]:
    """
    Convert a typed event into its wire form.

    Raises:
        KeyError: If the event has no wire name (log messages stay internal)
    """
    name = EVENT_NAMES[event.event_type]
    payload = to_wire(event)
    payload.pop("eventType", None)
    if event.event_type not in BATTLE_NUMBER_EVENTS:
        payload.pop("battleNumber", None)
    return name, payload


def _parse_answer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("answer must be a number")
    # numbers.* also admits numpy scalars
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError(f"answer {value!r} is not a whole number")
    raise ValueError(f"answer must be a number, got {type(value).__name__}")


def parse_command(name: str, payload: Optional[dict[str, Any]] = None) -> Command:
    """
    Parse a wire command.

    Raises:
        ValueError: If the name is unknown or the payload is malformed
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValueError(f"payload for '{name}' must be an object")

    if name == "submit-answer":
        if "value" not in payload:
            raise ValueError("submit-answer needs a 'value'")
        return SubmitAnswer(value=_parse_answer(payload["value"]))

    if name == "purchase-item":
        item_id = payload.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise ValueError("purchase-item needs a non-empty string 'id'")
        return PurchaseItem(item_id=item_id)

    if name == "close-shop":
        return CloseShop()

    raise ValueError(f"unknown command '{name}'")


class PresentationBridge:
    """Connects wire-level listeners and commands to a battle manager."""

    def __init__(self, event_manager: "EventManager", battle_manager: "BattleManager"):
        self.event_manager = event_manager
        self.battle_manager = battle_manager
        self._listeners: dict[str, list[WireListener]] = {name: [] for name in EVENT_NAMES.values()}

        self.event_manager.subscribe_all(self._handle_event, subscriber_name="PresentationBridge")

    def _emit_log(self, message: str, category: str = "INPUT", level: str = "WARNING") -> None:
        """Emit a log message event."""
        self.event_manager.publish(
            LogMessage(
                battle_number=self.battle_manager.session.battle_number,
                message=message,
                category=category,
                level=level,
                source="PresentationBridge",
            ),
            source="PresentationBridge",
        )

    def on(self, name: str, listener: WireListener) -> None:
        """Register a listener for a wire event name.

        Raises:
            ValueError: If the name is not a known event
        """
        if name not in self._listeners:
            raise ValueError(f"Unknown event name '{name}'")
        self._listeners[name].append(listener)

    def off(self, name: str, listener: WireListener) -> bool:
        """Remove a listener. Returns False if it was not registered."""
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def send(self, name: str, payload: Optional[dict[str, Any]] = None) -> bool:
        """
        Forward a wire command to the battle manager.

        Returns:
            bool: True if the command was parsed and accepted
        """
        try:
            command = parse_command(name, payload)
        except ValueError as e:
            self._emit_log(f"Rejected command '{name}': {e}")
            self.event_manager.process_events()
            return False

        return self.battle_manager.execute(command)

    def _handle_event(self, event: GameEvent) -> None:
        name = EVENT_NAMES.get(event.event_type)
        if name is None or not self._listeners[name]:
            return

        _, payload = marshal_event(event)
        for listener in list(self._listeners[name]):
            try:
                listener(name, payload)
            except Exception as e:
                self._emit_log(f"Listener for '{name}' failed: {e}", category="ERROR", level="ERROR")
