"""Mutable control state shared by the session and trial controllers."""

from __future__ import annotations

from dataclasses import dataclass

from dualnback.def_parameters import INITIAL_N


@dataclass
class SessionState:
    """The single mutable control-state object.

    Mutated only by SessionController, TrialScheduler and
    DifficultyController; read by the presentation side.
    """
    active_n: int = INITIAL_N
    game_number: int = 0
    trial_number: int = 0
    correct_count: int = 0
    in_progress: bool = False

    def reset(self, initial_n: int = INITIAL_N) -> None:
        self.active_n = initial_n
        self.game_number = 0
        self.trial_number = 0
        self.correct_count = 0
        self.in_progress = False


__all__ = ["SessionState"]
