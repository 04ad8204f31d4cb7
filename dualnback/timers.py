"""Timer queue driving the trial state machine.

Every wait in the task is a callback registered here with a delay in
milliseconds. Nothing fires on its own: a driver moves the clock forward with
`advance_to`, either from simulated time (tests, headless runs) or from the
PsychoPy wall clock once per frame. All callbacks run on the caller's thread.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class Timer:
    """Handle for a scheduled callback; ordered by deadline then creation."""
    deadline_ms: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    """Deadline-ordered one-shot timers over a manually advanced clock."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)
        self._heap: List[Timer] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for t in self._heap if not t.cancelled)

    @property
    def next_deadline(self) -> Optional[float]:
        live = [t.deadline_ms for t in self._heap if not t.cancelled]
        return min(live) if live else None

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Timer:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must not be negative, got {delay_ms}")
        timer = Timer(self._now + delay_ms, next(self._seq), callback)
        heapq.heappush(self._heap, timer)
        return timer

    def cancel(self, timer: Optional[Timer]) -> None:
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        for timer in self._heap:
            timer.cancel()
        self._heap.clear()

    def advance_to(self, t_ms: float) -> int:
        """Move the clock to t_ms, firing every timer due on the way.

        Timers scheduled by a callback fire in the same call if they fall due
        before t_ms. The clock reads each timer's deadline while it runs.
        Returns the number of callbacks fired.
        """
        if t_ms < self._now:
            raise ValueError(f"clock cannot move backwards ({t_ms} < {self._now})")
        fired = 0
        while self._heap and self._heap[0].deadline_ms <= t_ms:
            timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            self._now = max(self._now, timer.deadline_ms)
            timer.cancelled = True
            timer.callback()
            fired += 1
        self._now = t_ms
        return fired

    def advance(self, delta_ms: float) -> int:
        return self.advance_to(self._now + delta_ms)


__all__ = ["Timer", "TimerQueue"]
