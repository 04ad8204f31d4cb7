"""Tests for the per-trial timing state machine."""

from dualnback.commands import (
    ClearFeedback,
    Flash,
    RenderStimulus,
    SetInputEnabled,
    UpdateCounters,
)
from dualnback.def_parameters import TaskConfig
from dualnback.scoring import Action
from dualnback.stimuli import match_flags
from dualnback.trials import TrialPhase

# one symbol and one slot: every trial after the first N is an incidental match
SINGLE = TaskConfig(trials_per_game=3, symbols=("A",), positions=(1,))


def test_trial_start_emits_commands_in_order(make_scheduler, timers, commands):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(0)
    cmds = commands.drain()
    assert [type(c) for c in cmds] == [ClearFeedback, UpdateCounters, RenderStimulus, SetInputEnabled]
    assert cmds[2].stimulus is sched.current
    assert cmds[3].enabled is True
    assert sched.phase is TrialPhase.PRESENTING
    assert sched.state.trial_number == 1
    assert len(sched.history) == 1


def test_stimulus_cleared_after_presentation(make_scheduler, timers, commands):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(999)
    commands.drain()
    timers.advance_to(1000)
    assert commands.drain() == [RenderStimulus(None)]
    assert sched.phase is TrialPhase.AWAITING_RESPONSE
    assert sched.outcomes == []


def test_scoring_and_feedback_over_a_game(make_scheduler, timers, commands):
    ended = []
    sched = make_scheduler(SINGLE, on_game_end=lambda: ended.append(timers.now_ms))
    sched.begin(0)
    timers.advance_to(0)
    assert sched.expected_match is False

    # trial 1 times out with no match expected: correct, no flash
    timers.advance_to(2500)
    assert sched.outcomes[0].kind == "correct_rejection"
    assert commands.of_type(Flash) == []

    # trial 2 times out on a match: missed
    assert sched.expected_match is True
    timers.advance_to(5000)
    assert sched.outcomes[1].kind == "miss"
    assert commands.of_type(Flash) == [Flash(False)]

    # trial 3 answered early and correctly
    timers.advance_to(5100)
    commands.drain()
    assert sched.respond(Action.MATCH) is True
    assert commands.drain() == [SetInputEnabled(False), Flash(True)]
    assert sched.phase is TrialPhase.RESOLVED

    timers.advance_to(7500)
    assert [o.kind for o in sched.outcomes] == ["correct_rejection", "miss", "hit"]
    assert sched.state.correct_count == 2
    assert sched.phase is TrialPhase.GAME_END
    assert ended == [7500]
    assert timers.pending == 0


def test_one_outcome_per_trial_and_second_response_ignored(make_scheduler, timers):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(300)
    assert sched.respond(Action.NO_MATCH) is True
    assert sched.respond(Action.MATCH) is False
    timers.advance_to(2400)
    assert sched.respond(Action.MATCH) is False
    timers.advance_to(2500)
    assert len(sched.outcomes) == 1
    assert sched.outcomes[0].participant_action is Action.NO_MATCH


def test_response_accepted_after_stimulus_offset(make_scheduler, timers):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(2000)
    assert sched.phase is TrialPhase.AWAITING_RESPONSE
    assert sched.respond(Action.MATCH) is True


def test_cadence_is_fixed_regardless_of_response_time(make_scheduler, timers):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(100)
    sched.respond(Action.MATCH)
    timers.advance_to(2499)
    assert sched.state.trial_number == 1
    timers.advance_to(2500)
    assert sched.state.trial_number == 2
    assert sched.phase is TrialPhase.PRESENTING


def test_response_before_first_trial_is_ignored(make_scheduler, timers):
    sched = make_scheduler()
    sched.begin(2000)
    timers.advance_to(1500)
    assert sched.respond(Action.MATCH) is False
    assert sched.outcomes == []


def test_response_ignored_when_session_not_running(make_scheduler, timers):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(10)
    sched.state.in_progress = False
    assert sched.respond(Action.MATCH) is False


def test_game_runs_exactly_trials_per_game(make_scheduler, timers):
    ended = []
    sched = make_scheduler(TaskConfig(), on_game_end=lambda: ended.append(True))
    sched.begin(0)
    timers.advance_to(20 * 2500 + 10000)
    assert len(sched.outcomes) == 20
    assert sched.state.trial_number == 20
    assert ended == [True]


def test_expected_match_tracks_active_n(make_scheduler, timers):
    sched = make_scheduler(TaskConfig(trials_per_game=200), active_n=2)
    flags = []
    sched.begin(0)
    for k in range(200):
        timers.advance_to(k * 2500)
        flags.append(sched.expected_match)
    assert flags == match_flags(list(sched.history), 2)


def test_cancel_leaves_no_pending_timers(make_scheduler, timers, commands):
    sched = make_scheduler()
    sched.begin(0)
    timers.advance_to(1200)
    sched.cancel()
    commands.drain()
    assert timers.pending == 0
    assert sched.phase is TrialPhase.IDLE
    timers.advance_to(100000)
    assert len(commands) == 0
    assert sched.state.trial_number == 1
