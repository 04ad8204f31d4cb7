"""Session orchestration for the adaptive dual N-back task.

Structure: Start → Game 1 … Game K (each a block of fixed-cadence trials) →
session report. Between games the difficulty controller may move N up or
down; the stimulus history carries over so matches can span a game boundary.

All state lives on one SessionController. Every mutation happens inside one
of its public entry points or inside a timer callback fired by its
TimerQueue, so a single thread drives everything.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from dualnback.commands import (
    CommandQueue,
    ClearFeedback,
    Notify,
    RenderStimulus,
    SetInputEnabled,
    ShowGameSummary,
    ShowSessionSummary,
    UpdateCounters,
)
from dualnback.def_parameters import (
    NOTIFY_GAME_START_MS,
    NOTIFY_LEVEL_CHANGE_MS,
    NOTIFY_NEXT_GAME_MS,
    NOTIFY_RESET_MS,
    NOTIFY_SESSION_END_MS,
    NOTIFY_SESSION_START_MS,
    TaskConfig,
)
from dualnback.difficulty import DifficultyController
from dualnback.scoring import Action
from dualnback.state import SessionState
from dualnback.stimuli import StimulusHistory
from dualnback.timers import Timer, TimerQueue
from dualnback.trials import TrialScheduler

logger = logging.getLogger(__name__)


def half_up(numerator: int, denominator: int) -> int:
    """Integer nearest to numerator / denominator, ties rounded up."""
    return int(math.floor(numerator / denominator + 0.5))


@dataclass(frozen=True)
class GameRecord:
    game_number: int
    n: int
    total_trials: int
    correct_count: int
    accuracy_pct: int

    @classmethod
    def from_counts(cls, game_number: int, n: int, total_trials: int, correct_count: int) -> "GameRecord":
        if total_trials < 1:
            raise ValueError("a game record needs at least one trial")
        return cls(
            game_number=game_number,
            n=n,
            total_trials=total_trials,
            correct_count=correct_count,
            accuracy_pct=half_up(100 * correct_count, total_trials),
        )

    def summary(self) -> str:
        return (f"Game {self.game_number}: {self.accuracy_pct}% correct "
                f"({self.correct_count}/{self.total_trials})")


@dataclass(frozen=True)
class SessionReport:
    """End-of-session summary handed to the presentation surface."""
    average_accuracy: float
    final_n: int
    scores: Tuple[int, ...]
    strength: str
    weakness: str
    records: Tuple[GameRecord, ...] = field(default=())

    @classmethod
    def from_records(cls, records: List[GameRecord], final_n: int, *,
                     increase_threshold: float, decrease_threshold: float) -> "SessionReport":
        scores = tuple(r.accuracy_pct for r in records)
        # one decimal, rounded the same way as the per-game percentages
        average = half_up(10 * sum(scores), len(scores)) / 10.0 if scores else 0.0
        strength = "Excellent accuracy!" if average > increase_threshold else "Consistent performance."
        if average < decrease_threshold:
            weakness = "Focus on identifying matches/non-matches consistently."
        else:
            weakness = "Keep practicing!"
        return cls(
            average_accuracy=average,
            final_n=final_n,
            scores=scores,
            strength=strength,
            weakness=weakness,
            records=tuple(records),
        )

    def to_text(self) -> str:
        lines = [
            "Session Complete!",
            f"Average Accuracy: {self.average_accuracy:.1f}%",
            f"Final N-Level Reached: {self.final_n}",
            "Game Scores: " + ", ".join(f"{s}%" for s in self.scores),
            f"Strength: {self.strength}",
            f"Weakness: {self.weakness}",
        ]
        return "\n".join(lines)


class SessionController:
    """Owns the session state and runs games, trials and adaptation."""

    def __init__(self, config: Optional[TaskConfig] = None, *,
                 timers: Optional[TimerQueue] = None,
                 commands: Optional[CommandQueue] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.config = config or TaskConfig()
        self.timers = timers if timers is not None else TimerQueue()
        self.commands = commands if commands is not None else CommandQueue()
        self.state = SessionState(active_n=self.config.initial_n)
        self.history = StimulusHistory()
        self.records: List[GameRecord] = []
        self.report: Optional[SessionReport] = None
        self.difficulty = DifficultyController(
            self.state,
            window_size=self.config.performance_window,
            increase_threshold=self.config.increase_threshold,
            decrease_threshold=self.config.decrease_threshold,
        )
        self.trials = TrialScheduler(
            self.state, self.history, self.timers, self.commands, self.config,
            rng=rng, on_game_end=self._end_game,
        )
        self._next_game: Optional[Timer] = None

    # -- presentation entry points ------------------------------------------

    def on_match_action(self) -> bool:
        return self.trials.respond(Action.MATCH)

    def on_no_match_action(self) -> bool:
        return self.trials.respond(Action.NO_MATCH)

    def on_start_session(self) -> None:
        self.start_session()

    def on_reset_session(self) -> None:
        self.reset_session()

    # -- driving ------------------------------------------------------------

    def tick(self, now_ms: float) -> int:
        """Advance the session clock to now_ms, firing every due transition."""
        return self.timers.advance_to(now_ms)

    def drain_commands(self) -> List[Any]:
        return self.commands.drain()

    @property
    def scores(self) -> List[int]:
        return [r.accuracy_pct for r in self.records]

    # -- session ------------------------------------------------------------

    def start_session(self) -> None:
        if self.state.in_progress:
            logger.warning("start_session ignored: a session is already running")
            return
        self.timers.cancel_all()
        self.state.reset(self.config.initial_n)
        self.state.in_progress = True
        self.history.clear()
        self.records = []
        self.report = None
        self.difficulty.reset()
        logger.info("session started at N=%d", self.state.active_n)
        self.commands.emit(ShowSessionSummary(None))
        self.commands.emit(Notify(f"Session Started! N={self.state.active_n}", NOTIFY_SESSION_START_MS))
        self._start_game()

    def reset_session(self) -> None:
        """Stop everything and return to a blank state; safe from any state."""
        self.timers.cancel_all()
        self.trials.cancel()
        self._next_game = None
        self.state.reset(self.config.initial_n)
        self.history.clear()
        self.records = []
        self.report = None
        self.difficulty.reset()
        logger.info("session reset")
        self.commands.emit(SetInputEnabled(False))
        self.commands.emit(RenderStimulus(None))
        self.commands.emit(ClearFeedback())
        self.commands.emit(self._counters())
        self.commands.emit(ShowGameSummary(None))
        self.commands.emit(ShowSessionSummary(None))
        self.commands.emit(Notify("Session Reset. Start a new session when ready.", NOTIFY_RESET_MS))

    def _start_game(self) -> None:
        self._next_game = None
        if not self.state.in_progress:
            return
        self.state.game_number += 1
        self.state.trial_number = 0
        self.state.correct_count = 0
        logger.info("game %d/%d started at N=%d",
                    self.state.game_number, self.config.games_per_session, self.state.active_n)
        self.commands.emit(self._counters())
        self.commands.emit(ShowGameSummary(None))
        self.commands.emit(ClearFeedback())
        self.commands.emit(Notify(
            f"Starting Game {self.state.game_number} (N={self.state.active_n})", NOTIFY_GAME_START_MS))
        self.trials.begin(self.config.game_lead_in_ms)

    def _end_game(self) -> None:
        # the scheduler has already dropped its timers on reaching GAME_END
        self.commands.emit(RenderStimulus(None))
        self.commands.emit(SetInputEnabled(False))

        record = GameRecord.from_counts(
            game_number=self.state.game_number,
            n=self.state.active_n,
            total_trials=self.state.trial_number,
            correct_count=self.state.correct_count,
        )
        self.records.append(record)
        logger.info(record.summary())
        self.commands.emit(ShowGameSummary(record.summary()))

        adjustment = self.difficulty.on_game_complete(record.accuracy_pct)
        if adjustment is not None:
            self.commands.emit(Notify(adjustment.message, NOTIFY_LEVEL_CHANGE_MS))
            self.commands.emit(self._counters())

        if self.state.game_number >= self.config.games_per_session:
            self._end_session()
        else:
            if adjustment is None:
                self.commands.emit(Notify("Next game starting soon...", NOTIFY_NEXT_GAME_MS))
            self._next_game = self.timers.call_later(self.config.game_pause_ms, self._start_game)

    def _end_session(self) -> None:
        self.state.in_progress = False
        self.report = SessionReport.from_records(
            self.records,
            self.state.active_n,
            increase_threshold=self.config.increase_threshold,
            decrease_threshold=self.config.decrease_threshold,
        )
        logger.info("session finished: average %.1f%%, final N=%d",
                    self.report.average_accuracy, self.report.final_n)
        self.commands.emit(SetInputEnabled(False))
        self.commands.emit(ShowSessionSummary(self.report))
        self.commands.emit(Notify("Session Finished! See report below.", NOTIFY_SESSION_END_MS))

    def _counters(self) -> UpdateCounters:
        return UpdateCounters(
            n=self.state.active_n,
            game_number=self.state.game_number,
            trial_number=self.state.trial_number,
            games_per_session=self.config.games_per_session,
            trials_per_game=self.config.trials_per_game,
        )


__all__ = ["half_up", "GameRecord", "SessionReport", "SessionController"]
