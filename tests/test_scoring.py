"""Tests for response scoring and trial outcomes."""

import pytest

from dualnback.scoring import Action, TrialOutcome, score


@pytest.mark.parametrize("expected, action, correct", [
    (False, None, True),
    (True, None, False),
    (True, Action.MATCH, True),
    (False, Action.MATCH, False),
    (True, Action.NO_MATCH, False),
    (False, Action.NO_MATCH, True),
])
def test_score(expected, action, correct):
    assert score(expected, action) is correct


@pytest.mark.parametrize("expected, action, kind", [
    (True, Action.MATCH, "hit"),
    (True, None, "miss"),
    (True, Action.NO_MATCH, "miss"),
    (False, Action.MATCH, "false_alarm"),
    (False, None, "correct_rejection"),
    (False, Action.NO_MATCH, "correct_rejection"),
])
def test_outcome_kind(expected, action, kind):
    assert TrialOutcome.resolve(1, expected, action).kind == kind


def test_silent_correct_rejection_has_no_feedback():
    assert TrialOutcome.resolve(1, False, None).feedback is None


def test_missed_match_flashes_incorrect():
    assert TrialOutcome.resolve(1, True, None).feedback is False


def test_explicit_actions_flash_their_correctness():
    assert TrialOutcome.resolve(1, True, Action.MATCH).feedback is True
    assert TrialOutcome.resolve(1, True, Action.NO_MATCH).feedback is False
    assert TrialOutcome.resolve(1, False, Action.NO_MATCH).feedback is True


def test_outcome_is_immutable():
    outcome = TrialOutcome.resolve(3, False, Action.MATCH)
    with pytest.raises(AttributeError):
        outcome.correct = True
