"""PsychoPy presentation surface for the dual N-back task.

Receives the presentation commands drained from the SessionController and
keeps the matching visual state: the 3x3 grid (centre cell inert), the
feedback frame, counters, transient notifications, action labels and the
game/session summaries. `draw` puts the current state in the back buffer;
the runner flips.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from psychopy import core, visual

from dualnback.commands import (
    ClearFeedback,
    Flash,
    Notify,
    RenderStimulus,
    SetInputEnabled,
    ShowGameSummary,
    ShowSessionSummary,
    UpdateCounters,
)
from dualnback.def_parameters import (
    CELL_ACTIVE_COLOR,
    CELL_COLOR,
    CELL_GAP,
    CELL_SIZE,
    CENTER_POSITION,
    CORRECT_COLOR,
    DISABLED_COLOR,
    FONT,
    FONT_HEIGHT,
    INCORRECT_COLOR,
    KEY_MATCH,
    KEY_NO_MATCH,
    POSITIONS,
    SMALL_FONT_HEIGHT,
    TEXT_COLOR,
)
from dualnback.stimuli import StimulusEvent, position_to_cell


def _default_wrap_width(win: visual.Window, margin: float = 0.95) -> float:
    try:
        aspect = win.size[0] / float(win.size[1])
    except Exception:
        aspect = 16/9
    return aspect * margin


def make_autosized_text(
    win: visual.Window,
    text: str,
    start_height: float = 0.05,
    min_height: float = 0.02,
    max_height_frac: float = 0.8,
    shrink_factor: float = 0.9,
    pos=(0, 0),
) -> visual.TextStim:
    """Build a centred TextStim, shrinking the font until it fits the window."""
    stim = visual.TextStim(
        win,
        text=text,
        color=TEXT_COLOR,
        font=FONT,
        height=start_height,
        wrapWidth=_default_wrap_width(win),
        alignText='center',
        anchorHoriz='center',
        anchorVert='center',
        pos=pos,
    )
    h = start_height
    bb = getattr(stim, 'boundingBox', None)
    while bb and len(bb) > 1 and bb[1] > win.size[1] * max_height_frac:
        h *= shrink_factor
        if h < min_height:
            break
        stim.height = h
        bb = getattr(stim, 'boundingBox', None)
    return stim


def cell_center(position: int, cell_size: float = CELL_SIZE, gap: float = CELL_GAP):
    """Window coordinates (height units) of a grid slot's centre."""
    row, col = position_to_cell(position)
    step = cell_size + gap
    return ((col - 1) * step, (1 - row) * step)


class PsychoPySurface:
    """Applies presentation commands to PsychoPy stimuli."""

    def __init__(self, win: visual.Window, clock: Optional[core.Clock] = None) -> None:
        self.win = win
        self.clock = clock or core.Clock()
        self.input_enabled = False
        self.feedback: Optional[bool] = None
        self.current: Optional[StimulusEvent] = None
        self._notify_until: Optional[float] = None
        self._session_text: Optional[visual.TextStim] = None

        self.cells: Dict[int, visual.Rect] = {}
        for pos in range(1, 10):
            rect = visual.Rect(win, width=CELL_SIZE, height=CELL_SIZE, pos=cell_center(pos),
                               fillColor=CELL_COLOR, lineColor=None)
            if pos == CENTER_POSITION or pos not in POSITIONS:
                rect.opacity = 0.3
            self.cells[pos] = rect
        self.glyph = visual.TextStim(win, text="", color=TEXT_COLOR, font=FONT, height=FONT_HEIGHT)
        grid_span = 3 * CELL_SIZE + 3 * CELL_GAP
        self.frame = visual.Rect(win, width=grid_span, height=grid_span, pos=(0, 0),
                                 fillColor=None, lineColor=None, lineWidth=6)
        self.counters = visual.TextStim(win, text="", color=TEXT_COLOR, font=FONT,
                                        height=SMALL_FONT_HEIGHT, pos=(0, 0.44))
        self.notification = visual.TextStim(win, text="", color=TEXT_COLOR, font=FONT,
                                            height=SMALL_FONT_HEIGHT, pos=(0, 0.37))
        self.game_summary = visual.TextStim(win, text="", color=TEXT_COLOR, font=FONT,
                                            height=SMALL_FONT_HEIGHT, pos=(0, -0.44))
        self.match_label = visual.TextStim(win, text=f"[{KEY_MATCH.upper()}] Match", font=FONT,
                                           height=SMALL_FONT_HEIGHT, pos=(-0.2, -0.34))
        self.no_match_label = visual.TextStim(win, text=f"[{KEY_NO_MATCH.upper()}] No match", font=FONT,
                                              height=SMALL_FONT_HEIGHT, pos=(0.2, -0.34))

    # -- commands -----------------------------------------------------------

    def apply(self, command: Any) -> None:
        if isinstance(command, RenderStimulus):
            self.render(command.stimulus)
        elif isinstance(command, SetInputEnabled):
            self.input_enabled = command.enabled
        elif isinstance(command, Flash):
            self.feedback = command.correct
        elif isinstance(command, ClearFeedback):
            self.feedback = None
        elif isinstance(command, Notify):
            self.notify(command.message, command.duration_ms)
        elif isinstance(command, UpdateCounters):
            self.counters.text = command.text()
        elif isinstance(command, ShowGameSummary):
            self.game_summary.text = command.text or ""
        elif isinstance(command, ShowSessionSummary):
            if command.report is None:
                self._session_text = None
            else:
                self._session_text = make_autosized_text(self.win, command.report.to_text(), pos=(0, 0))
        else:
            raise TypeError(f"unknown presentation command: {command!r}")

    def render(self, stimulus: Optional[StimulusEvent]) -> None:
        if self.current is not None:
            self.cells[self.current.position].fillColor = CELL_COLOR
        self.current = stimulus
        if stimulus is not None:
            self.cells[stimulus.position].fillColor = CELL_ACTIVE_COLOR
            self.glyph.text = stimulus.value
            self.glyph.pos = cell_center(stimulus.position)

    def notify(self, message: str, duration_ms: int) -> None:
        self.notification.text = message
        now_ms = self.clock.getTime() * 1000.0
        self._notify_until = now_ms + duration_ms if duration_ms > 0 else None

    # -- drawing ------------------------------------------------------------

    def draw(self, now_ms: Optional[float] = None) -> None:
        if now_ms is None:
            now_ms = self.clock.getTime() * 1000.0
        if self._notify_until is not None and now_ms >= self._notify_until:
            self.notification.text = ""
            self._notify_until = None

        self.counters.draw()
        if self.notification.text:
            self.notification.draw()

        if self._session_text is not None:
            self._session_text.draw()
            return

        for rect in self.cells.values():
            rect.draw()
        if self.current is not None:
            self.glyph.draw()
        if self.feedback is not None:
            self.frame.lineColor = CORRECT_COLOR if self.feedback else INCORRECT_COLOR
            self.frame.draw()

        label_color = TEXT_COLOR if self.input_enabled else DISABLED_COLOR
        self.match_label.color = label_color
        self.no_match_label.color = label_color
        self.match_label.draw()
        self.no_match_label.draw()
        if self.game_summary.text:
            self.game_summary.draw()


__all__ = [
    "make_autosized_text",
    "cell_center",
    "PsychoPySurface",
]
