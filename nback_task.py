#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PsychoPy adaptive dual N-back task with optional marker plumbing for EEG/eye-tracking.
- Runs out of the box with markers disabled (no-op); pass --markers to drive a parallel port.
- A session is GAMES games of TRIALS trials; N starts at 1 and adapts from the
  average accuracy of the last five games.

Structure: ENTER starts a session → games with fixed-cadence trials → session report.
Keys: M = match, N = no match, R = reset session, ESC = quit.

Nothing is written to disk; a console summary is printed on exit.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import List, Optional

from psychopy import core, event, visual
try:
    from psychopy.hardware import keyboard as hw_keyboard
    _HAVE_HW_KB = True
except Exception:
    _HAVE_HW_KB = False

from dualnback.commands import Notify
from dualnback.def_parameters import (
    BACKGROUND_COLOR,
    GAMES_PER_SESSION,
    INTER_TRIAL_INTERVAL_MS,
    KEY_MATCH,
    KEY_NO_MATCH,
    KEY_QUIT,
    KEY_RESET,
    KEY_START,
    MATCH_PROBABILITY,
    STIMULUS_DURATION_MS,
    TRIALS_PER_GAME,
    TaskConfig,
)
from dualnback.markers import MarkerSender, create_parallel_port
from dualnback.presentation import PsychoPySurface
from dualnback.session import SessionController, SessionReport
from dualnback.timers import TimerQueue

"""Main dual N-back entry point.

The SessionController holds all task logic and timing. This file only wires
PsychoPy to it: each frame it forwards key presses, advances the controller's
timer queue to the PsychoPy clock, applies the queued presentation commands
(and their markers) to the surface, then draws and flips. Timing resolution is
therefore one display frame.
"""

logger = logging.getLogger("nback_task")

TASK_KEYS = [KEY_MATCH, KEY_NO_MATCH, KEY_START, KEY_RESET, KEY_QUIT]


def build_config(args: argparse.Namespace) -> TaskConfig:
    """Clamp CLI values into a valid TaskConfig."""
    return TaskConfig(
        trials_per_game=max(1, int(args.trials)),
        games_per_session=max(1, int(args.games)),
        stimulus_duration_ms=max(1, int(args.stim_ms)),
        inter_trial_interval_ms=max(0, int(args.iti_ms)),
        match_probability=float(max(0.0, min(1.0, args.match_prob))),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PsychoPy adaptive dual N-back task")
    parser.add_argument("--games", type=int, default=GAMES_PER_SESSION, help="Games per session (default: 10)")
    parser.add_argument("--trials", type=int, default=TRIALS_PER_GAME, help="Trials per game (default: 20)")
    parser.add_argument("--stim-ms", type=int, default=STIMULUS_DURATION_MS, help="Stimulus duration in ms (default: 1000)")
    parser.add_argument("--iti-ms", type=int, default=INTER_TRIAL_INTERVAL_MS, help="Blank interval after the stimulus in ms (default: 1500)")
    parser.add_argument("--match-prob", type=float, default=MATCH_PROBABILITY, help="Forced match probability (0-1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    # Default to full-screen; allow windowed mode for debugging
    parser.add_argument("--windowed", action="store_true", help="Run windowed for debugging (default: fullscreen)")
    parser.add_argument("--screen", type=int, default=None, help="Display/screen index (0=primary). If unset, PsychoPy default is used.")
    parser.add_argument("--kb-backend", choices=["ptb", "event"], default="event", help="Keyboard backend: 'ptb' (hardware; low-latency) or 'event' (fallback)")
    parser.add_argument("--markers", action="store_true", help="Send event markers to the parallel port (0x03BC)")
    parser.add_argument("--autostart", action="store_true", help="Start the first session without waiting for ENTER")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level (default: WARNING)")
    return parser


def poll_keys(kb, clock: core.Clock) -> List[str]:
    if kb is not None:
        return [k.name for k in kb.getKeys(keyList=TASK_KEYS, waitRelease=False)]
    return [k for k, _t in event.getKeys(keyList=TASK_KEYS, timeStamped=clock)]


def dispatch_key(key: str, controller: SessionController, markers: MarkerSender) -> bool:
    """Forward one key press to the controller; False means quit.

    Match/no-match presses go straight to the controller, which ignores them
    outside an open response window.
    """
    if key == KEY_QUIT:
        logger.info("quit requested")
        return False
    if key == KEY_START:
        controller.on_start_session()
    elif key == KEY_RESET:
        controller.on_reset_session()
    elif key == KEY_MATCH:
        if controller.on_match_action():
            markers.send_named('response_match')
    elif key == KEY_NO_MATCH:
        if controller.on_no_match_action():
            markers.send_named('response_no_match')
    return True


def print_summary(report: Optional[SessionReport]) -> None:
    print("\n===== Session Summary =====")
    if report is None:
        print("No session completed.")
    else:
        for record in report.records:
            print(f"{record.summary()} at N={record.n}")
        print(f"Average accuracy: {report.average_accuracy:.1f}%")
        print(f"Final N: {report.final_n}")
        print(f"Strength: {report.strength}")
        print(f"Weakness: {report.weakness}")
    print("===========================\n")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry-point for running the dual N-back task.

    Flow:
    - Parse CLI, build the TaskConfig, open the window and marker backend.
    - Frame loop: keys → controller → commands → surface/markers → flip.
    - ESC closes the window and prints the last session report.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = build_config(args)
    rng = random.Random(args.seed)

    # Configure window
    fullscr = not bool(args.windowed)
    win_kwargs = dict(size=(1280, 720), color=BACKGROUND_COLOR, units="height", fullscr=fullscr, allowGUI=False)
    if args.screen is not None:
        win_kwargs["screen"] = int(args.screen)
    win = visual.Window(**win_kwargs)
    try:
        win.mouseVisible = False
    except Exception:
        pass

    # Hardware markers: safe initialization (works without hardware)
    markers = MarkerSender(enabled=False)
    if args.markers:
        try:
            markers = MarkerSender(parallel_port=create_parallel_port(0x03BC), enabled=True)
        except Exception as exc:
            print(f"Note: parallel port unavailable ({exc}); markers disabled.")

    kb = None
    if args.kb_backend == "ptb":
        if _HAVE_HW_KB:
            kb = hw_keyboard.Keyboard()
        else:
            print("Note: psychtoolbox keyboard backend unavailable; falling back to 'event' backend.")

    clock = core.Clock()
    timers = TimerQueue(start_ms=0.0)
    controller = SessionController(config, timers=timers, rng=rng)
    surface = PsychoPySurface(win, clock=clock)
    surface.apply(Notify(f"Press {KEY_START.upper()} to start a session", 0))
    if args.autostart:
        controller.on_start_session()

    running = True
    while running:
        now_ms = clock.getTime() * 1000.0
        controller.tick(now_ms)
        for key in poll_keys(kb, clock):
            if not dispatch_key(key, controller, markers):
                running = False
                break

        for command in controller.drain_commands():
            surface.apply(command)
            markers.on_command(command)

        surface.draw(now_ms)
        win.flip()

    report = controller.report
    controller.on_reset_session()
    try:
        win.close()
    except Exception:
        pass
    print_summary(report)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except SystemExit:
        raise
    except Exception:
        # Ensure graceful close if window exists
        try:
            core.quit()
        except Exception:
            pass
        raise
