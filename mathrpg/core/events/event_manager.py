"""
Event bus between the battle manager and its listeners.

The battle manager, the presentation bridge and the log manager never call
each other directly for notifications; they publish typed events here and
subscribe to the types they care about.

Delivery model:
- publish() only queues; process_events() delivers in priority order,
  publish order breaking ties
- A subscriber that publishes while events are being delivered has its
  events appended to the same delivery pass
- A subscriber that raises is reported as an ERROR LogMessage and the
  remaining subscribers still run
"""

import heapq
import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

from .events import EventType, LogMessage

if TYPE_CHECKING:
    from .events import GameEvent


class EventPriority(Enum):
    """Event processing priorities."""
    LOW = 1
    NORMAL = 2
    HIGH = 3
    CRITICAL = 4


_sequence = itertools.count()


@dataclass
class QueuedEvent:
    """An event waiting in the queue."""
    event: "GameEvent"
    priority: EventPriority = EventPriority.NORMAL
    source: Optional[str] = None
    sequence: int = field(default_factory=lambda: next(_sequence))

    def __lt__(self, other: "QueuedEvent") -> bool:
        # Higher priority first, then publish order
        if self.priority.value != other.priority.value:
            return self.priority.value > other.priority.value
        return self.sequence < other.sequence


EventSubscriber = Callable[["GameEvent"], None]


@dataclass
class Subscription:
    """A registered callback and the name used when reporting its failures."""
    callback: EventSubscriber
    name: str


class EventManager:
    """Central event bus for battle notifications."""

    def __init__(self):
        self._subscriptions: dict[EventType, list[Subscription]] = defaultdict(list)
        self._universal: list[Subscription] = []
        self._queue: list[QueuedEvent] = []

        self._events_published = 0
        self._events_processed = 0
        self._subscriber_errors = 0

        # Set while subscribers are being notified; nested process calls defer
        self._dispatching = False

    @property
    def is_dispatching(self) -> bool:
        """True while process_events() is delivering events."""
        return self._dispatching

    @staticmethod
    def _subscription(subscriber: EventSubscriber, subscriber_name: Optional[str]) -> Subscription:
        return Subscription(subscriber, subscriber_name or getattr(subscriber, '__name__', 'anonymous'))

    def subscribe(
        self,
        event_type: EventType,
        subscriber: EventSubscriber,
        subscriber_name: Optional[str] = None
    ) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: The type of events to subscribe to
            subscriber: Callback receiving each event
            subscriber_name: Name used in error logs (defaults to the callback's name)
        """
        self._subscriptions[event_type].append(self._subscription(subscriber, subscriber_name))

    def subscribe_all(self, subscriber: EventSubscriber, subscriber_name: Optional[str] = None) -> None:
        """Subscribe to every event type."""
        self._universal.append(self._subscription(subscriber, subscriber_name))

    def unsubscribe(self, event_type: EventType, subscriber: EventSubscriber) -> bool:
        """Remove a typed subscription. Returns False if it was not registered."""
        subscriptions = self._subscriptions.get(event_type, [])
        for subscription in subscriptions:
            if subscription.callback == subscriber:
                subscriptions.remove(subscription)
                return True
        return False

    def publish(
        self,
        event: "GameEvent",
        priority: EventPriority = EventPriority.NORMAL,
        source: Optional[str] = None
    ) -> None:
        """Queue an event for the next process_events() pass."""
        heapq.heappush(self._queue, QueuedEvent(event=event, priority=priority, source=source or "unknown"))
        self._events_published += 1

    def publish_immediate(self, event: "GameEvent", source: Optional[str] = None) -> None:
        """Deliver an event right away, bypassing the queue."""
        self._events_published += 1
        self._deliver(QueuedEvent(event=event, priority=EventPriority.CRITICAL, source=source or "immediate"))

    def process_events(self, max_events: Optional[int] = None) -> int:
        """Deliver queued events in priority order.

        Events published by subscribers while this runs are delivered by the
        same call, after the events already queued ahead of them. A nested
        call from inside a subscriber returns 0 and leaves the work to the
        outer call.

        Args:
            max_events: Maximum number of events to process (None for all)

        Returns:
            Number of events processed
        """
        if self._dispatching:
            return 0

        processed_count = 0
        self._dispatching = True
        try:
            while self._queue and (max_events is None or processed_count < max_events):
                self._deliver(heapq.heappop(self._queue))
                processed_count += 1
        finally:
            self._dispatching = False

        return processed_count

    def _deliver(self, queued_event: QueuedEvent) -> None:
        event = queued_event.event
        self._events_processed += 1

        subscriptions = list(self._subscriptions.get(event.event_type, [])) + list(self._universal)
        for subscription in subscriptions:
            try:
                subscription.callback(event)
            except Exception as e:
                self._subscriber_errors += 1
                self._report_failure(subscription, event, e)

    def _report_failure(self, subscription: Subscription, event: "GameEvent", error: Exception) -> None:
        # A failing log listener would fail again on its own error report
        if event.event_type == EventType.LOG_MESSAGE:
            return
        self.publish(
            LogMessage(
                battle_number=event.battle_number,
                message=f"Subscriber {subscription.name} failed on {event.__class__.__name__}: {error}",
                category="ERROR",
                level="ERROR",
                source="EventManager",
            ),
            priority=EventPriority.HIGH,
            source="EventManager",
        )

    def get_statistics(self) -> dict[str, Any]:
        """Counters for published, processed and failed deliveries."""
        return {
            'events_published': self._events_published,
            'events_processed': self._events_processed,
            'events_queued': len(self._queue),
            'subscriber_errors': self._subscriber_errors,
            'subscribers_count': sum(len(subs) for subs in self._subscriptions.values()),
            'universal_subscribers_count': len(self._universal),
        }
