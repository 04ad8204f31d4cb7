"""Response scoring for the N-back task.

A trial is scored once, when its response window closes or as soon as the
participant acts. Doing nothing counts as a "no match" judgement.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class Action(enum.Enum):
    MATCH = "match"
    NO_MATCH = "no_match"


def score(expected_match: bool, action: Optional[Action]) -> bool:
    """Return True if the participant's action (or its absence) was correct.

    - explicit action: correct when asserting MATCH agrees with expected_match
    - timeout (None): correct rejection when no match was expected, a miss otherwise
    """
    if action is None:
        return not expected_match
    return (action is Action.MATCH) == bool(expected_match)


@dataclass(frozen=True)
class TrialOutcome:
    """Result of one trial, created when the trial resolves."""
    trial_index: int
    expected_match: bool
    participant_action: Optional[Action]
    correct: bool

    @classmethod
    def resolve(cls, trial_index: int, expected_match: bool, action: Optional[Action]) -> "TrialOutcome":
        return cls(
            trial_index=trial_index,
            expected_match=expected_match,
            participant_action=action,
            correct=score(expected_match, action),
        )

    @property
    def kind(self) -> str:
        """Signal-detection category: hit, miss, false_alarm or correct_rejection."""
        asserted_match = self.participant_action is Action.MATCH
        if self.expected_match:
            return "hit" if asserted_match else "miss"
        return "false_alarm" if asserted_match else "correct_rejection"

    @property
    def feedback(self) -> Optional[bool]:
        """Value to flash for this outcome, or None when nothing is shown.

        Explicit actions always get feedback; a timeout only flashes when a
        match was missed.
        """
        if self.participant_action is not None:
            return self.correct
        return None if self.correct else False


__all__ = [
    "Action",
    "score",
    "TrialOutcome",
]
