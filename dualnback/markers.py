from __future__ import annotations

"""Event marker transport for the dual N-back task.

This module centralizes event marker codes and sends them over the usual
physiology backends (parallel port and EyeLink). Markers are disabled by
default so the task stays self-contained; enable them only when the hardware
is available and configured.

The core never talks to hardware. The runner passes each drained presentation
command through `MarkerSender.on_command`, which looks up the matching trigger
with `marker_for_command`.
"""

import logging
from typing import Any, Dict, Optional

from dualnback.commands import (
    Flash,
    Notify,
    RenderStimulus,
    ShowGameSummary,
    ShowSessionSummary,
)

logger = logging.getLogger(__name__)

# Default numeric codes for named triggers.
# Chosen to be unique and <=255 so they fit on an 8-bit parallel port output.
DEFAULT_TRIGGERS: Dict[str, int] = {
    'session_start': 1,
    'session_reset': 2,
    'game_start': 20,
    'game_end': 21,
    'level_change': 22,
    'stim_onset': 40,
    'stim_offset': 41,
    'response_match': 50,
    'response_no_match': 51,
    'feedback_correct': 60,
    'feedback_incorrect': 61,
    'session_end': 99,
}


def marker_for_command(command: Any) -> Optional[str]:
    """Return the trigger name a presentation command should emit, if any."""
    if isinstance(command, RenderStimulus):
        return 'stim_onset' if command.stimulus is not None else 'stim_offset'
    if isinstance(command, Flash):
        return 'feedback_correct' if command.correct else 'feedback_incorrect'
    if isinstance(command, ShowGameSummary) and command.text is not None:
        return 'game_end'
    if isinstance(command, ShowSessionSummary) and command.report is not None:
        return 'session_end'
    if isinstance(command, Notify):
        if command.message.startswith("Session Started"):
            return 'session_start'
        if command.message.startswith("Starting Game"):
            return 'game_start'
        if command.message.startswith("Session Reset"):
            return 'session_reset'
        if "Moving to N" in command.message:
            return 'level_change'
    return None


class MarkerSender:
    """Send numeric markers to a parallel port and/or an EyeLink tracker.

    Parameters
    - parallel_port: psychopy.parallel.ParallelPort instance (optional)
    - eyelink: pylink.EyeLink instance (optional)
    - enabled: when False every send is a no-op

    Backend failures are logged and never interrupt the task.
    """

    def __init__(self, parallel_port: Optional[Any] = None,
                 eyelink: Optional[Any] = None,
                 enabled: bool = False,
                 triggers: Optional[Dict[str, int]] = None) -> None:
        self.parallel_port = parallel_port
        self.eyelink = eyelink
        self.enabled = bool(enabled)
        self.triggers: Dict[str, int] = dict(triggers or DEFAULT_TRIGGERS)

    def set_trigger_code(self, name: str, code: int) -> None:
        """Change the numeric code associated with a named trigger."""
        if name not in self.triggers:
            raise KeyError(f'Unknown trigger name: {name}')
        self.triggers[name] = int(code) & 0xFF

    def send(self, code: int) -> None:
        if not self.enabled:
            return
        if self.parallel_port is not None:
            try:
                self.parallel_port.setData(int(code) & 0xFF)
            except Exception as exc:
                logger.warning("parallel port marker %s failed: %s", code, exc)
        # EyeLink expects a string message
        if self.eyelink is not None:
            try:
                self.eyelink.sendMessage(str(code))
            except Exception as exc:
                logger.warning("EyeLink marker %s failed: %s", code, exc)

    def send_named(self, name: str) -> None:
        """Look up a named trigger (KeyError if unknown) and send it."""
        self.send(self.triggers[name])

    def on_command(self, command: Any) -> Optional[str]:
        name = marker_for_command(command)
        if name is not None:
            self.send_named(name)
        return name


def create_parallel_port(address: int = 0x03BC):
    """Create and return a PsychoPy ParallelPort instance.

    psychopy.parallel is imported here rather than at module import time so
    the core stays usable on machines without port drivers.
    """
    from psychopy import parallel
    return parallel.ParallelPort(address=address)


__all__ = [
    "DEFAULT_TRIGGERS",
    "marker_for_command",
    "MarkerSender",
    "create_parallel_port",
]
