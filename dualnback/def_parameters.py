"""Default parameters and constants for the adaptive dual N-back task.

Separated from the controllers and the runner to keep things tidy and
reusable. `TaskConfig` bundles the tunable values; the module constants are
its defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Stimulus set
STIMULI_LETTERS = ("A", "B", "C", "D", "E", "F", "G", "H")
STIMULI_NUMBERS = ("1", "2", "3", "4", "5", "6", "7", "8")
SYMBOLS = STIMULI_LETTERS + STIMULI_NUMBERS
# 3x3 grid numbered row-major from 1; the centre cell (5) is never used
POSITIONS = (1, 2, 3, 4, 6, 7, 8, 9)
CENTER_POSITION = 5

# Task structure
TRIALS_PER_GAME = 20
GAMES_PER_SESSION = 10
INITIAL_N = 1

# Timing (ms)
STIMULUS_DURATION_MS = 1000
INTER_TRIAL_INTERVAL_MS = 1500
TRIAL_WINDOW_MS = STIMULUS_DURATION_MS + INTER_TRIAL_INTERVAL_MS
GAME_LEAD_IN_MS = 2000
GAME_PAUSE_MS = 2500

# Sequence / adaptation
MATCH_PROBABILITY = 0.25
PERFORMANCE_WINDOW = 5
ACCURACY_THRESHOLD_INCREASE = 85  # raise N if window average is above this
ACCURACY_THRESHOLD_DECREASE = 65  # lower N if window average is below this

# Notification durations (ms); 0 keeps the message until replaced
NOTIFY_SESSION_START_MS = 2000
NOTIFY_GAME_START_MS = 1500
NOTIFY_NEXT_GAME_MS = 2000
NOTIFY_LEVEL_CHANGE_MS = 3000
NOTIFY_RESET_MS = 3000
NOTIFY_SESSION_END_MS = 5000

# Visuals
BACKGROUND_COLOR = [0.2, 0.2, 0.2]  # gray
TEXT_COLOR = [1.0, 1.0, 1.0]
CELL_COLOR = [-0.6, -0.6, -0.6]
CELL_ACTIVE_COLOR = [-0.2, 0.1, 0.6]
CORRECT_COLOR = [-0.6, 0.8, -0.6]
INCORRECT_COLOR = [0.9, -0.7, -0.7]
DISABLED_COLOR = [-0.1, -0.1, -0.1]
FONT = "Arial"
FONT_HEIGHT = 0.08  # normalized (height) units
SMALL_FONT_HEIGHT = 0.035
CELL_SIZE = 0.16
CELL_GAP = 0.015

# Keys
KEY_MATCH = "m"
KEY_NO_MATCH = "n"
KEY_START = "return"
KEY_RESET = "r"
KEY_QUIT = "escape"


@dataclass(frozen=True)
class TaskConfig:
    """Tunable task parameters, defaulting to the module constants."""

    trials_per_game: int = TRIALS_PER_GAME
    games_per_session: int = GAMES_PER_SESSION
    stimulus_duration_ms: int = STIMULUS_DURATION_MS
    inter_trial_interval_ms: int = INTER_TRIAL_INTERVAL_MS
    game_lead_in_ms: int = GAME_LEAD_IN_MS
    game_pause_ms: int = GAME_PAUSE_MS
    match_probability: float = MATCH_PROBABILITY
    performance_window: int = PERFORMANCE_WINDOW
    increase_threshold: float = ACCURACY_THRESHOLD_INCREASE
    decrease_threshold: float = ACCURACY_THRESHOLD_DECREASE
    initial_n: int = INITIAL_N
    symbols: Tuple[str, ...] = SYMBOLS
    positions: Tuple[int, ...] = POSITIONS

    def __post_init__(self) -> None:
        if self.trials_per_game < 1:
            raise ValueError(f"trials_per_game must be >= 1, got {self.trials_per_game}")
        if self.games_per_session < 1:
            raise ValueError(f"games_per_session must be >= 1, got {self.games_per_session}")
        if self.stimulus_duration_ms <= 0:
            raise ValueError("stimulus_duration_ms must be positive")
        if self.inter_trial_interval_ms < 0:
            raise ValueError("inter_trial_interval_ms must not be negative")
        if self.game_lead_in_ms < 0 or self.game_pause_ms < 0:
            raise ValueError("game lead-in and pause must not be negative")
        if not 0.0 <= self.match_probability <= 1.0:
            raise ValueError(f"match_probability must be within [0, 1], got {self.match_probability}")
        if self.performance_window < 1:
            raise ValueError("performance_window must be >= 1")
        if self.decrease_threshold > self.increase_threshold:
            raise ValueError("decrease_threshold must not exceed increase_threshold")
        if self.initial_n < 1:
            raise ValueError("initial_n must be >= 1")
        if not self.symbols or not self.positions:
            raise ValueError("symbols and positions must be non-empty")

    @property
    def trial_window_ms(self) -> int:
        """Full trial length: stimulus plus inter-trial interval."""
        return self.stimulus_duration_ms + self.inter_trial_interval_ms


__all__ = [
    # stimulus set
    "STIMULI_LETTERS",
    "STIMULI_NUMBERS",
    "SYMBOLS",
    "POSITIONS",
    "CENTER_POSITION",
    # structure
    "TRIALS_PER_GAME",
    "GAMES_PER_SESSION",
    "INITIAL_N",
    # timing
    "STIMULUS_DURATION_MS",
    "INTER_TRIAL_INTERVAL_MS",
    "TRIAL_WINDOW_MS",
    "GAME_LEAD_IN_MS",
    "GAME_PAUSE_MS",
    # adaptation
    "MATCH_PROBABILITY",
    "PERFORMANCE_WINDOW",
    "ACCURACY_THRESHOLD_INCREASE",
    "ACCURACY_THRESHOLD_DECREASE",
    # notifications
    "NOTIFY_SESSION_START_MS",
    "NOTIFY_GAME_START_MS",
    "NOTIFY_NEXT_GAME_MS",
    "NOTIFY_LEVEL_CHANGE_MS",
    "NOTIFY_RESET_MS",
    "NOTIFY_SESSION_END_MS",
    # visuals
    "BACKGROUND_COLOR",
    "TEXT_COLOR",
    "CELL_COLOR",
    "CELL_ACTIVE_COLOR",
    "CORRECT_COLOR",
    "INCORRECT_COLOR",
    "DISABLED_COLOR",
    "FONT",
    "FONT_HEIGHT",
    "SMALL_FONT_HEIGHT",
    "CELL_SIZE",
    "CELL_GAP",
    # keys
    "KEY_MATCH",
    "KEY_NO_MATCH",
    "KEY_START",
    "KEY_RESET",
    "KEY_QUIT",
    # config
    "TaskConfig",
]
