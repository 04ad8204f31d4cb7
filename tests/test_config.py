"""Tests for TaskConfig defaults and validation."""

import pytest

from dualnback import def_parameters as params
from dualnback.def_parameters import TaskConfig


def test_defaults_match_protocol_constants():
    cfg = TaskConfig()
    assert cfg.trials_per_game == 20
    assert cfg.games_per_session == 10
    assert cfg.trial_window_ms == params.TRIAL_WINDOW_MS == 2500
    assert cfg.match_probability == 0.25
    assert cfg.performance_window == 5
    assert len(cfg.symbols) == 16 and len(set(cfg.symbols)) == 16
    assert params.CENTER_POSITION not in cfg.positions
    assert len(cfg.positions) == 8


def test_trial_window_follows_durations():
    cfg = TaskConfig(stimulus_duration_ms=500, inter_trial_interval_ms=700)
    assert cfg.trial_window_ms == 1200


@pytest.mark.parametrize("kwargs", [
    {"trials_per_game": 0},
    {"games_per_session": 0},
    {"stimulus_duration_ms": 0},
    {"inter_trial_interval_ms": -1},
    {"game_pause_ms": -5},
    {"match_probability": 1.5},
    {"match_probability": -0.1},
    {"performance_window": 0},
    {"increase_threshold": 60, "decrease_threshold": 70},
    {"initial_n": 0},
    {"symbols": ()},
    {"positions": ()},
])
def test_invalid_config_raises(kwargs):
    with pytest.raises(ValueError):
        TaskConfig(**kwargs)
