"""Cancellable delayed callbacks on an explicitly advanced clock."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field

TICK = 1.0


@dataclass(order=True)
class TimerHandle:
    """One scheduled callback; `cancel()` prevents it from firing."""

    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler:
    """Single-threaded timer queue.

    Nothing fires on its own: callers move time forward with `advance()` or
    jump straight through pending work with `run_until_idle()`. Callbacks run
    in due order and may schedule further callbacks.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[TimerHandle] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule `callback` to fire `delay` time units from now."""
        if delay < 0:
            raise ValueError(f"Delay must be non-negative, got {delay}.")
        handle = TimerHandle(self.now + delay, next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def pending(self) -> int:
        """Return the number of live timers."""
        return sum(1 for handle in self._queue if handle.pending)

    def next_due(self) -> float | None:
        """Return the due time of the earliest live timer."""
        self._drop_dead()
        return self._queue[0].due if self._queue else None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that falls due."""
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards by {seconds}.")
        target = self.now + seconds
        fired = 0
        while True:
            due = self.next_due()
            if due is None or due > target:
                break
            fired += self._fire_next()
        self.now = target
        return fired

    def run_until_idle(self, limit: int = 1000) -> int:
        """Fire pending timers in order, jumping the clock, until none remain."""
        fired = 0
        while fired < limit and self.next_due() is not None:
            fired += self._fire_next()
        return fired

    def _fire_next(self) -> int:
        handle = heapq.heappop(self._queue)
        self.now = max(self.now, handle.due)
        handle.fired = True
        handle.callback()
        return 1

    def _drop_dead(self) -> None:
        while self._queue and not self._queue[0].pending:
            heapq.heappop(self._queue)


class Countdown:
    """Per-challenge countdown that ticks once per time unit."""

    def __init__(
        self,
        scheduler: Scheduler,
        seconds: int,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
    ) -> None:
        self.scheduler = scheduler
        self.remaining = seconds
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._handle: TimerHandle | None = None
        self._stopped = False

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.pending

    def start(self) -> None:
        self._handle = self.scheduler.call_later(TICK, self._tick)

    def cancel(self) -> None:
        self._stopped = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self.remaining -= 1
        self._on_tick(self.remaining)
        if self._stopped:
            return
        if self.remaining <= 0:
            self._handle = None
            self._on_expire()
            return
        self._handle = self.scheduler.call_later(TICK, self._tick)
