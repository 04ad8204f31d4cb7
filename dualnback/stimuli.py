from __future__ import annotations

"""Stimulus generation for the adaptive dual N-back task.

Responsibilities:
- Hold the session-long stimulus history (append-only, never reset between
    games so an N-back target may sit in the previous game).
- Produce each trial's (symbol, position) pair, forcing a match against the
    N-back predecessor with a fixed probability and otherwise drawing both
    features uniformly and independently.

Matching notes:
- A match means both features equal the stimulus exactly N presentations
    earlier. Only that single slot is checked; repeats at other lags are not
    tracked.
- The first N stimuli of a fresh history can never be matches.
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from dualnback.def_parameters import MATCH_PROBABILITY, POSITIONS, SYMBOLS

logger = logging.getLogger(__name__)

GRID_COLUMNS = 3


@dataclass(frozen=True)
class StimulusEvent:
    """One presented stimulus.

    Fields:
    - value: symbol shown in the cell
    - position: grid slot (1-9, centre excluded)
    - trial_index: global trial counter across the whole session
    """
    value: str
    position: int
    trial_index: int

    def same_stimulus(self, other: Optional["StimulusEvent"]) -> bool:
        """True if both features match; the trial index is ignored."""
        if other is None:
            return False
        return self.value == other.value and self.position == other.position


class StimulusHistory:
    """Append-only record of every stimulus shown in a session."""

    def __init__(self, events: Iterable[StimulusEvent] = ()) -> None:
        self._events: List[StimulusEvent] = []
        for ev in events:
            self.append(ev)

    def append(self, event: StimulusEvent) -> None:
        if self._events and event.trial_index <= self._events[-1].trial_index:
            raise ValueError(
                f"trial_index must increase: {event.trial_index} after {self._events[-1].trial_index}"
            )
        self._events.append(event)

    def n_back(self, n: int) -> Optional[StimulusEvent]:
        """Return the stimulus N presentations back from the next one, if any."""
        if n < 1 or len(self._events) < n:
            return None
        return self._events[len(self._events) - n]

    def next_trial_index(self) -> int:
        return self._events[-1].trial_index + 1 if self._events else 1

    def clear(self) -> None:
        self._events.clear()

    @property
    def last(self) -> Optional[StimulusEvent]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[StimulusEvent]:
        return iter(self._events)

    def __getitem__(self, idx: int) -> StimulusEvent:
        return self._events[idx]


def generate_stimulus(history: Union[StimulusHistory, Sequence[StimulusEvent]], n: int, *,
                      trial_index: Optional[int] = None,
                      rng: Optional[random.Random] = None,
                      match_probability: float = MATCH_PROBABILITY,
                      symbols: Sequence[str] = SYMBOLS,
                      positions: Sequence[int] = POSITIONS) -> Tuple[StimulusEvent, bool]:
    """Generate the next stimulus and whether it is an N-back match.

    Inputs:
    - history: stimuli shown so far this session (not modified)
    - n: active N level (>= 1)
    - trial_index: index for the new event; defaults to the next one after history
    - rng: random source; the module-level generator when omitted
    - match_probability: chance of forcing a match when an N-back candidate exists

    Returns: (StimulusEvent, expected_match)
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    rng = rng or random  # module-level generator honours random.seed()
    if trial_index is None:
        if isinstance(history, StimulusHistory):
            trial_index = history.next_trial_index()
        else:
            trial_index = history[-1].trial_index + 1 if len(history) else 1

    candidate_exists = len(history) >= n
    target = history[len(history) - n] if candidate_exists else None
    force_match = candidate_exists and rng.random() < match_probability

    if force_match:
        assert target is not None
        event = StimulusEvent(value=target.value, position=target.position, trial_index=trial_index)
        logger.debug("trial %d: forced match with trial %d", trial_index, target.trial_index)
        return event, True

    value = rng.choice(list(symbols))
    position = rng.choice(list(positions))
    event = StimulusEvent(value=value, position=position, trial_index=trial_index)
    expected_match = event.same_stimulus(target)
    if expected_match:
        logger.debug("trial %d: incidental match with trial %d", trial_index, target.trial_index)
    return event, expected_match


def match_flags(events: Sequence[StimulusEvent], n: int) -> List[bool]:
    """Recompute the expected-match flag for every stimulus in a sequence at a fixed N."""
    return [i >= n and ev.same_stimulus(events[i - n]) for i, ev in enumerate(events)]


def position_to_cell(position: int) -> Tuple[int, int]:
    """Map a 1-based grid slot to its zero-based (row, col)."""
    if not 1 <= position <= GRID_COLUMNS * GRID_COLUMNS:
        raise ValueError(f"position out of grid: {position}")
    return divmod(position - 1, GRID_COLUMNS)


__all__ = [
    "StimulusEvent",
    "StimulusHistory",
    "generate_stimulus",
    "match_flags",
    "position_to_cell",
]
