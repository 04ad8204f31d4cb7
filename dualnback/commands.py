"""Presentation commands queued by the controllers.

The core never draws anything. Each transition appends commands here and the
presentation surface (or a test) drains and applies them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional

from dualnback.stimuli import StimulusEvent

if TYPE_CHECKING:
    from dualnback.session import SessionReport


@dataclass(frozen=True)
class RenderStimulus:
    """Show the stimulus at its position, or clear the grid when None."""
    stimulus: Optional[StimulusEvent]


@dataclass(frozen=True)
class SetInputEnabled:
    enabled: bool


@dataclass(frozen=True)
class Flash:
    correct: bool


@dataclass(frozen=True)
class ClearFeedback:
    pass


@dataclass(frozen=True)
class Notify:
    """Transient status text; duration_ms == 0 keeps it until replaced."""
    message: str
    duration_ms: int


@dataclass(frozen=True)
class UpdateCounters:
    n: int
    game_number: int
    trial_number: int
    games_per_session: int
    trials_per_game: int

    def text(self) -> str:
        return (f"N = {self.n}    Game: {self.game_number}/{self.games_per_session}"
                f"    Trial: {self.trial_number}/{self.trials_per_game}")


@dataclass(frozen=True)
class ShowGameSummary:
    text: Optional[str]


@dataclass(frozen=True)
class ShowSessionSummary:
    report: Optional["SessionReport"]


class CommandQueue:
    """Ordered outbox of presentation commands."""

    def __init__(self, listener: Optional[Callable[[Any], None]] = None) -> None:
        self._items: List[Any] = []
        self.listener = listener

    def emit(self, command: Any) -> None:
        self._items.append(command)
        if self.listener is not None:
            self.listener(command)

    def drain(self) -> List[Any]:
        items, self._items = self._items, []
        return items

    def of_type(self, kind: type) -> List[Any]:
        return [c for c in self._items if isinstance(c, kind)]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))


__all__ = [
    "RenderStimulus",
    "SetInputEnabled",
    "Flash",
    "ClearFeedback",
    "Notify",
    "UpdateCounters",
    "ShowGameSummary",
    "ShowSessionSummary",
    "CommandQueue",
]
