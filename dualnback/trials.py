"""Trial scheduling for one game of the dual N-back task.

Implements a fixed-cadence trial structure:
- Each trial lasts exactly one trial window from stimulus onset to the next
  onset, however early the participant responds.
- The stimulus is shown for the stimulus duration, then the grid is cleared
  until the window elapses.
- One response (match / no-match) is accepted anywhere inside the window; it
  resolves the trial immediately. With no response the trial resolves when
  the window closes.

The scheduler only queues presentation commands and timer callbacks; it never
blocks or draws.
"""

from __future__ import annotations

import enum
import logging
import random
from typing import Callable, List, Optional

from dualnback.commands import (
    ClearFeedback,
    CommandQueue,
    Flash,
    RenderStimulus,
    SetInputEnabled,
    UpdateCounters,
)
from dualnback.def_parameters import TaskConfig
from dualnback.scoring import Action, TrialOutcome
from dualnback.state import SessionState
from dualnback.stimuli import StimulusEvent, StimulusHistory, generate_stimulus
from dualnback.timers import Timer, TimerQueue

logger = logging.getLogger(__name__)


class TrialPhase(enum.Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_RESPONSE = "awaiting_response"
    RESOLVED = "resolved"
    GAME_END = "game_end"


OPEN_PHASES = (TrialPhase.PRESENTING, TrialPhase.AWAITING_RESPONSE)


class TrialScheduler:
    """Runs the trials of one game on a TimerQueue."""

    def __init__(self, state: SessionState, history: StimulusHistory, timers: TimerQueue,
                 commands: CommandQueue, config: Optional[TaskConfig] = None, *,
                 rng: Optional[random.Random] = None,
                 on_game_end: Optional[Callable[[], None]] = None) -> None:
        self.state = state
        self.history = history
        self.timers = timers
        self.commands = commands
        self.config = config or TaskConfig()
        self.rng = rng
        self.on_game_end = on_game_end
        self.phase = TrialPhase.IDLE
        self.outcomes: List[TrialOutcome] = []
        self.current: Optional[StimulusEvent] = None
        self.expected_match = False
        self._trial_start_ms = 0.0
        self._timers: List[Timer] = []

    # -- lifecycle ---------------------------------------------------------

    def begin(self, delay_ms: float = 0) -> None:
        """Reset per-game counters and schedule the first trial."""
        self.cancel()
        self.state.trial_number = 0
        self.state.correct_count = 0
        self.outcomes = []
        self.current = None
        self._schedule(delay_ms, self._start_trial)

    def cancel(self) -> None:
        """Invalidate every pending timer of this scheduler and go idle."""
        for timer in self._timers:
            self.timers.cancel(timer)
        self._timers = []
        self.phase = TrialPhase.IDLE

    @property
    def running(self) -> bool:
        return self.phase not in (TrialPhase.IDLE, TrialPhase.GAME_END)

    # -- transitions -------------------------------------------------------

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        self._timers = [t for t in self._timers if not t.cancelled]
        self._timers.append(self.timers.call_later(delay_ms, callback))

    def _start_trial(self) -> None:
        cfg = self.config
        if self.state.trial_number >= cfg.trials_per_game:
            self._finish_game()
            return

        self.state.trial_number += 1
        self._trial_start_ms = self.timers.now_ms
        stimulus, expected = generate_stimulus(
            self.history,
            self.state.active_n,
            rng=self.rng,
            match_probability=cfg.match_probability,
            symbols=cfg.symbols,
            positions=cfg.positions,
        )
        self.history.append(stimulus)
        self.current = stimulus
        self.expected_match = expected
        self.phase = TrialPhase.PRESENTING
        logger.debug("trial %d/%d (#%d): %s at %d, N=%d, expect match=%s",
                     self.state.trial_number, cfg.trials_per_game, stimulus.trial_index,
                     stimulus.value, stimulus.position, self.state.active_n, expected)

        self.commands.emit(ClearFeedback())
        self.commands.emit(UpdateCounters(
            n=self.state.active_n,
            game_number=self.state.game_number,
            trial_number=self.state.trial_number,
            games_per_session=cfg.games_per_session,
            trials_per_game=cfg.trials_per_game,
        ))
        self.commands.emit(RenderStimulus(stimulus))
        self.commands.emit(SetInputEnabled(True))

        self._schedule(cfg.stimulus_duration_ms, self._end_presentation)
        self._schedule(cfg.trial_window_ms, self._close_window)

    def _end_presentation(self) -> None:
        self.commands.emit(RenderStimulus(None))
        if self.phase is TrialPhase.PRESENTING:
            self.phase = TrialPhase.AWAITING_RESPONSE

    def respond(self, action: Action) -> bool:
        """Accept the participant's action for the current trial.

        Returns False (and changes nothing) when the session is not running,
        no trial has started yet, or this trial already has a response.
        """
        if not self.state.in_progress or self.state.trial_number == 0:
            return False
        if self.phase not in OPEN_PHASES:
            return False
        self._resolve(action)
        return True

    def _resolve(self, action: Optional[Action]) -> None:
        assert self.current is not None
        outcome = TrialOutcome.resolve(self.current.trial_index, self.expected_match, action)
        self.outcomes.append(outcome)
        if outcome.correct:
            self.state.correct_count += 1
        self.phase = TrialPhase.RESOLVED
        if action is not None:
            self.commands.emit(SetInputEnabled(False))
        if outcome.feedback is not None:
            self.commands.emit(Flash(outcome.feedback))
        logger.debug("trial #%d resolved: %s (%s) after %.0f ms",
                     outcome.trial_index, outcome.kind,
                     "correct" if outcome.correct else "incorrect",
                     self.timers.now_ms - self._trial_start_ms)

    def _close_window(self) -> None:
        if self.phase in OPEN_PHASES:
            self._resolve(None)
        if self.state.trial_number < self.config.trials_per_game:
            self._start_trial()
        else:
            self._finish_game()

    def _finish_game(self) -> None:
        self.cancel()
        self.phase = TrialPhase.GAME_END
        self.commands.emit(SetInputEnabled(False))
        if self.on_game_end is not None:
            self.on_game_end()


__all__ = ["TrialPhase", "TrialScheduler"]
