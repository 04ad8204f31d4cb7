"""
Shared pytest fixtures for the dual N-back tests.

Everything here runs headless: time is simulated with a TimerQueue and the
presentation surface is replaced by inspecting the CommandQueue.
"""

import random

import pytest

from dualnback.commands import CommandQueue
from dualnback.def_parameters import TaskConfig
from dualnback.session import SessionController
from dualnback.state import SessionState
from dualnback.stimuli import StimulusHistory
from dualnback.timers import TimerQueue
from dualnback.trials import TrialScheduler


@pytest.fixture
def rng():
    """Seeded random source so stimulus sequences are reproducible."""
    return random.Random(1234)


@pytest.fixture
def timers():
    return TimerQueue()


@pytest.fixture
def commands():
    return CommandQueue()


@pytest.fixture
def controller(timers, commands, rng):
    """SessionController with default parameters on simulated time."""
    return SessionController(timers=timers, commands=commands, rng=rng)


@pytest.fixture
def make_scheduler(timers, commands, rng):
    """Factory for a TrialScheduler inside a running session."""
    def _make(config=None, active_n=1, on_game_end=None):
        state = SessionState(active_n=active_n, game_number=1, in_progress=True)
        return TrialScheduler(
            state, StimulusHistory(), timers, commands, config or TaskConfig(),
            rng=rng, on_game_end=on_game_end,
        )
    return _make
