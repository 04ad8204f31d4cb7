"""Adaptive N-level control across games.

After every game the accuracy is pushed into a sliding window. Once the
window is full its mean decides the next N: above the increase threshold N
goes up by one, below the decrease threshold it goes down by one (never below
1). Any change empties the window so the next decision needs a fresh run of
games at the new level.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from dualnback.def_parameters import (
    ACCURACY_THRESHOLD_DECREASE,
    ACCURACY_THRESHOLD_INCREASE,
    PERFORMANCE_WINDOW,
)
from dualnback.state import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Adjustment:
    previous_n: int
    new_n: int
    average: float

    @property
    def increased(self) -> bool:
        return self.new_n > self.previous_n

    @property
    def message(self) -> str:
        if self.increased:
            return f"Great job! Moving to N = {self.new_n}"
        return f"Let's adjust. Moving to N = {self.new_n}"


class DifficultyController:
    """Adjusts ``state.active_n`` from recent game accuracies."""

    def __init__(self, state: SessionState, *,
                 window_size: int = PERFORMANCE_WINDOW,
                 increase_threshold: float = ACCURACY_THRESHOLD_INCREASE,
                 decrease_threshold: float = ACCURACY_THRESHOLD_DECREASE) -> None:
        self.state = state
        self.window_size = window_size
        self.increase_threshold = increase_threshold
        self.decrease_threshold = decrease_threshold
        self._window: Deque[float] = deque(maxlen=window_size)

    @property
    def window(self) -> List[float]:
        return list(self._window)

    def reset(self) -> None:
        self._window.clear()

    def on_game_complete(self, accuracy_pct: float) -> Optional[Adjustment]:
        """Record a game's accuracy and adjust N if the window calls for it."""
        self._window.append(accuracy_pct)
        if len(self._window) < self.window_size:
            logger.debug("adaptation window %d/%d, no decision", len(self._window), self.window_size)
            return None

        average = sum(self._window) / len(self._window)
        previous = self.state.active_n
        if average > self.increase_threshold:
            self.state.active_n = previous + 1
        elif average < self.decrease_threshold and previous > 1:
            self.state.active_n = previous - 1
        else:
            logger.debug("window average %.1f%% keeps N = %d", average, previous)
            return None

        self._window.clear()
        adjustment = Adjustment(previous_n=previous, new_n=self.state.active_n, average=average)
        logger.info("N %d -> %d (window average %.1f%%)", previous, adjustment.new_n, average)
        return adjustment


__all__ = ["Adjustment", "DifficultyController"]
