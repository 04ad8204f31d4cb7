#!/usr/bin/env python3
from __future__ import annotations

"""Preview generated dual N-back stimuli without running the task.

Usage:
    PYTHONPATH=. python scripts/preview_seq.py [n_back] [trials] [seed]

Defaults: n_back=2, trials=20, seed unset
"""

import random
import sys

from dualnback.stimuli import StimulusHistory, generate_stimulus, match_flags

n = int(sys.argv[1]) if len(sys.argv) > 1 else 2
trials = int(sys.argv[2]) if len(sys.argv) > 2 else 20
seed = int(sys.argv[3]) if len(sys.argv) > 3 else None
rng = random.Random(seed)

history = StimulusHistory()
expected = []
for _ in range(trials):
        stim, is_match = generate_stimulus(history, n, rng=rng)
        history.append(stim)
        expected.append(is_match)

print('n_back:', n, 'trials:', trials)
print('values:    ', ' '.join(s.value for s in history))
print('positions: ', ' '.join(str(s.position) for s in history))
print('match:     ', ' '.join('x' if m else '.' for m in expected))
print('matches:   ', sum(expected), f'({100.0 * sum(expected) / max(trials, 1):.0f}%)')
assert expected == match_flags(list(history), n), 'expected-match flags disagree with the sequence'
