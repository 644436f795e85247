"""
Unit tests for the Event Manager system.

Tests the publisher-subscriber hub that carries battle events to the
presentation layer and internal listeners.
"""

from unittest.mock import Mock

from mathrpg.core.events import EventPriority, QueuedEvent
from mathrpg.core.events.events import CombatResult, EventType, PlayerDefeated


def make_event(battle_number: int = 1, message: str = "test") -> CombatResult:
    return CombatResult(battle_number=battle_number, success=True, damage=10, message=message)


class TestQueuedEvent:
    """Test QueuedEvent functionality."""

    def test_queued_event_creation(self):
        """Test basic queued event creation."""
        event = make_event()
        queued = QueuedEvent(event=event, priority=EventPriority.HIGH, source="test")

        assert queued.event == event
        assert queued.priority == EventPriority.HIGH
        assert queued.source == "test"

    def test_higher_priority_sorts_first(self):
        """Higher priority values are delivered before lower ones."""
        low = QueuedEvent(make_event(), EventPriority.LOW)
        critical = QueuedEvent(make_event(), EventPriority.CRITICAL)

        assert critical < low
        assert not low < critical

    def test_same_priority_keeps_publish_order(self):
        """Events with the same priority keep their publish order."""
        first = QueuedEvent(make_event(), EventPriority.NORMAL)
        second = QueuedEvent(make_event(), EventPriority.NORMAL)

        assert first < second


class TestEventManager:
    """Test EventManager functionality."""

    def test_event_manager_creation(self, event_manager):
        """Test event manager initialization."""
        stats = event_manager.get_statistics()
        assert stats['events_published'] == 0
        assert stats['events_processed'] == 0

    def test_subscribe_counts(self, event_manager):
        """Typed and universal subscriptions are tracked separately."""
        event_manager.subscribe(EventType.COMBAT_RESULT, Mock())
        event_manager.subscribe_all(Mock())

        stats = event_manager.get_statistics()
        assert stats['subscribers_count'] == 1
        assert stats['universal_subscribers_count'] == 1

    def test_publish_queues_until_processed(self, event_manager):
        """Published events wait for process_events()."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, subscriber)

        event_manager.publish(make_event(), source="test")

        subscriber.assert_not_called()
        assert event_manager.get_statistics()["events_queued"] == 1
        assert event_manager.process_events() == 1
        subscriber.assert_called_once()
        assert event_manager.get_statistics()["events_queued"] == 0

    def test_publish_immediate(self, event_manager):
        """Test immediate event publishing and processing."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, subscriber)

        event = make_event()
        event_manager.publish_immediate(event, source="test")

        subscriber.assert_called_once_with(event)

    def test_subscribers_only_receive_their_type(self, event_manager):
        """Typed subscribers ignore other event types; universal ones see all."""
        combat_subscriber = Mock()
        universal_subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, combat_subscriber)
        event_manager.subscribe_all(universal_subscriber)

        event_manager.publish_immediate(make_event())
        event_manager.publish_immediate(PlayerDefeated(battle_number=1, final_score=0))

        assert combat_subscriber.call_count == 1
        assert universal_subscriber.call_count == 2

    def test_process_events_with_limit(self, event_manager):
        """Test processing limited number of events."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, subscriber)

        for i in range(5):
            event_manager.publish(make_event(battle_number=i))

        assert event_manager.process_events(max_events=2) == 2
        assert subscriber.call_count == 2
        assert event_manager.get_statistics()["events_queued"] == 3

    def test_event_priority_processing(self, event_manager):
        """Events are processed from highest to lowest priority."""
        results = []
        event_manager.subscribe(EventType.COMBAT_RESULT, lambda event: results.append(event.message))

        event_manager.publish(make_event(message="low"), EventPriority.LOW)
        event_manager.publish(make_event(message="critical"), EventPriority.CRITICAL)
        event_manager.publish(make_event(message="normal"), EventPriority.NORMAL)
        event_manager.publish(make_event(message="high"), EventPriority.HIGH)

        event_manager.process_events()

        assert results == ["critical", "high", "normal", "low"]

    def test_unsubscribe(self, event_manager):
        """Test unsubscribing from events."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, subscriber)

        assert event_manager.unsubscribe(EventType.COMBAT_RESULT, subscriber)
        assert not event_manager.unsubscribe(EventType.COMBAT_RESULT, subscriber)

        event_manager.publish_immediate(make_event())
        subscriber.assert_not_called()

    def test_failing_subscriber_does_not_break_delivery(self, event_manager):
        """A subscriber that raises is counted and the others still run."""
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        event_manager.subscribe(EventType.COMBAT_RESULT, failing)
        event_manager.subscribe(EventType.COMBAT_RESULT, healthy)

        event_manager.publish(make_event())
        event_manager.process_events()

        healthy.assert_called_once()
        assert event_manager.get_statistics()['subscriber_errors'] == 1

    def test_events_published_during_dispatch_follow_current_ones(self, event_manager):
        """Events published by a subscriber are delivered after those already queued."""
        order = []

        def on_combat(event):
            order.append(event.message)
            if event.message == "first":
                event_manager.publish(make_event(message="reply"))
                # A nested call defers to the outer loop
                assert event_manager.process_events() == 0

        event_manager.subscribe(EventType.COMBAT_RESULT, on_combat)
        event_manager.publish(make_event(message="first"))
        event_manager.publish(make_event(message="second"))

        assert event_manager.process_events() == 3
        assert order == ["first", "second", "reply"]
        assert not event_manager.is_dispatching

    def test_failing_subscriber_is_logged(self, event_manager):
        """A subscriber that raises produces an ERROR log entry naming it."""
        from mathrpg.game.managers.log_manager import LogCategory, LogLevel, LogManager

        log_manager = LogManager(event_manager)
        event_manager.subscribe(
            EventType.COMBAT_RESULT,
            Mock(side_effect=RuntimeError("listener exploded")),
            subscriber_name="HudPanel",
        )

        event_manager.publish(make_event())
        event_manager.process_events()

        errors = [entry for entry in log_manager.messages if "exploded" in entry.text]
        assert len(errors) == 1
        assert errors[0].category == LogCategory.ERROR
        assert errors[0].level == LogLevel.ERROR
        assert "HudPanel" in errors[0].text
        assert "CombatResult" in errors[0].text

    def test_failing_log_subscriber_is_not_reported_again(self, event_manager):
        """A raising log listener is counted without looping on its own report."""
        log_subscriber = Mock(side_effect=RuntimeError("log sink down"))
        event_manager.subscribe(EventType.LOG_MESSAGE, log_subscriber)
        event_manager.subscribe(EventType.COMBAT_RESULT, Mock(side_effect=RuntimeError("boom")))

        event_manager.publish(make_event())

        assert event_manager.process_events() == 2
        assert log_subscriber.call_count == 1
        assert event_manager.get_statistics()['subscriber_errors'] == 2
