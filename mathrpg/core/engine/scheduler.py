"""One-shot delayed callbacks for battle pacing.

The battle manager never sleeps. Whenever it wants the presentation layer to
have time to show a result, it schedules the next phase through a Scheduler
and returns. Delays are cosmetic pacing only.

Core Concepts:
- ManualScheduler keeps a virtual clock in integer milliseconds for
  deterministic tests and headless runs
- Entries are ordered by due time, then by scheduling order
- Cancellation is lazy: cancelled handles are skipped when popped
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional


ScheduledCallback = Callable[[], None]


class Scheduler(ABC):
    """Interface the battle manager uses for delayed callbacks."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: ScheduledCallback) -> int:
        """Run callback once after delay_ms. Returns a handle for cancel()."""

    @abstractmethod
    def cancel(self, handle: int) -> bool:
        """Cancel a pending callback. Returns False if it already ran or is unknown."""


@dataclass
class SchedulerEntry:
    """A callback waiting on the virtual clock."""

    due_time: int
    handle: int
    callback: ScheduledCallback = field(compare=False)

    def __lt__(self, other: "SchedulerEntry") -> bool:
        """Earlier due time first, then scheduling order for ties."""
        if self.due_time != other.due_time:
            return self.due_time < other.due_time
        return self.handle < other.handle


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by explicit advance() calls."""

    def __init__(self):
        self._queue: list[SchedulerEntry] = []
        self._current_time: int = 0
        self._handles = itertools.count(1)
        self._cancelled: set[int] = set()

    @property
    def current_time(self) -> int:
        """Virtual time in milliseconds."""
        return self._current_time

    @property
    def pending_count(self) -> int:
        return sum(1 for entry in self._queue if entry.handle not in self._cancelled)

    @property
    def is_idle(self) -> bool:
        return self.pending_count == 0

    def schedule(self, delay_ms: int, callback: ScheduledCallback) -> int:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        entry = SchedulerEntry(
            due_time=self._current_time + delay_ms,
            handle=next(self._handles),
            callback=callback,
        )
        heapq.heappush(self._queue, entry)
        return entry.handle

    def cancel(self, handle: int) -> bool:
        for entry in self._queue:
            if entry.handle == handle and handle not in self._cancelled:
                self._cancelled.add(handle)
                return True
        return False

    def peek_next_due(self) -> Optional[int]:
        """Due time of the next live entry, or None when idle."""
        self._discard_cancelled_head()
        return self._queue[0].due_time if self._queue else None

    def advance(self, ms: int) -> int:
        """Move the clock forward, firing every callback that comes due.

        Callbacks scheduled by fired callbacks also run if they fall inside
        the window.

        Returns:
            Number of callbacks fired
        """
        target_time = self._current_time + ms
        fired = 0

        while True:
            self._discard_cancelled_head()
            if not self._queue or self._queue[0].due_time > target_time:
                break
            entry = heapq.heappop(self._queue)
            self._current_time = entry.due_time
            entry.callback()
            fired += 1

        self._current_time = target_time
        return fired

    def run_until_idle(self, max_callbacks: int = 10_000) -> int:
        """Fire callbacks in due order until nothing is pending.

        Raises:
            RuntimeError: If max_callbacks is exceeded (a callback keeps rescheduling)
        """
        fired = 0
        while True:
            next_due = self.peek_next_due()
            if next_due is None:
                return fired
            if fired >= max_callbacks:
                raise RuntimeError(f"Scheduler did not go idle after {max_callbacks} callbacks")
            fired += self.advance(next_due - self._current_time)

    def clear(self) -> None:
        self._queue.clear()
        self._cancelled.clear()

    def _discard_cancelled_head(self) -> None:
        while self._queue and self._queue[0].handle in self._cancelled:
            entry = heapq.heappop(self._queue)
            self._cancelled.discard(entry.handle)


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop's call_later."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handles = itertools.count(1)
        self._timers: dict[int, asyncio.TimerHandle] = {}

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def schedule(self, delay_ms: int, callback: ScheduledCallback) -> int:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        handle = next(self._handles)

        def fire() -> None:
            self._timers.pop(handle, None)
            callback()

        self._timers[handle] = self.loop.call_later(delay_ms / 1000.0, fire)
        return handle

    def cancel(self, handle: int) -> bool:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return False
        timer.cancel()
        return True
