"""Tests for the one-shot schedulers used for battle pacing."""

import asyncio

import pytest

from mathrpg.core.engine import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    """Virtual-clock scheduler behaviour."""

    def test_callbacks_fire_when_due(self, scheduler):
        fired = []
        scheduler.schedule(1000, lambda: fired.append("a"))

        assert scheduler.advance(999) == 0
        assert fired == []
        assert scheduler.advance(1) == 1
        assert fired == ["a"]
        assert scheduler.current_time == 1000

    def test_due_order_then_schedule_order(self, scheduler):
        fired = []
        scheduler.schedule(200, lambda: fired.append("late"))
        scheduler.schedule(100, lambda: fired.append("first"))
        scheduler.schedule(100, lambda: fired.append("second"))

        scheduler.advance(500)

        assert fired == ["first", "second", "late"]

    def test_cancelled_callbacks_never_fire(self, scheduler):
        fired = []
        handle = scheduler.schedule(100, lambda: fired.append("x"))

        assert scheduler.cancel(handle)
        assert not scheduler.cancel(handle)
        scheduler.advance(1000)

        assert fired == []
        assert scheduler.is_idle

    def test_callbacks_scheduled_inside_window_also_fire(self, scheduler):
        fired = []

        def chain():
            fired.append(scheduler.current_time)
            if len(fired) < 3:
                scheduler.schedule(100, chain)

        scheduler.schedule(100, chain)
        scheduler.advance(250)

        assert fired == [100, 200]
        assert scheduler.pending_count == 1

    def test_run_until_idle(self, scheduler):
        fired = []
        scheduler.schedule(3000, lambda: fired.append(3))
        scheduler.schedule(1000, lambda: fired.append(1))

        assert scheduler.run_until_idle() == 2
        assert fired == [1, 3]
        assert scheduler.current_time == 3000
        assert scheduler.peek_next_due() is None

    def test_run_until_idle_detects_runaway_rescheduling(self, scheduler):
        def forever():
            scheduler.schedule(1, forever)

        scheduler.schedule(1, forever)
        with pytest.raises(RuntimeError):
            scheduler.run_until_idle(max_callbacks=50)

    def test_negative_delay_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.schedule(-1, lambda: None)

    def test_clear(self, scheduler):
        scheduler.schedule(10, lambda: None)
        scheduler.clear()
        assert scheduler.is_idle


class TestAsyncioScheduler:
    """Event-loop backed scheduler."""

    def test_schedule_and_cancel(self):
        async def scenario():
            scheduler = AsyncioScheduler()
            fired = []
            scheduler.schedule(5, lambda: fired.append("kept"))
            dropped = scheduler.schedule(5, lambda: fired.append("dropped"))
            assert scheduler.cancel(dropped)
            assert scheduler.pending_count == 1
            await asyncio.sleep(0.05)
            return fired, scheduler.pending_count

        fired, pending = asyncio.run(scenario())

        assert fired == ["kept"]
        assert pending == 0
