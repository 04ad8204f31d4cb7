"""Tests for the PsychoPy surface with its stimuli mocked out."""

from unittest.mock import MagicMock

import pytest

pytest.importorskip("psychopy.visual")

from dualnback import presentation  # noqa: E402
from dualnback.commands import ClearFeedback, Flash, Notify, RenderStimulus, SetInputEnabled  # noqa: E402
from dualnback.def_parameters import CELL_ACTIVE_COLOR, CELL_COLOR  # noqa: E402
from dualnback.stimuli import StimulusEvent  # noqa: E402


@pytest.fixture
def clock():
    clock = MagicMock()
    clock.getTime.return_value = 0.0
    return clock


@pytest.fixture
def surface(monkeypatch, clock):
    # each Rect/TextStim is its own MagicMock; no window is opened
    fake_visual = MagicMock()
    fake_visual.Rect.side_effect = lambda *a, **kw: MagicMock()
    fake_visual.TextStim.side_effect = lambda *a, **kw: MagicMock()
    monkeypatch.setattr(presentation, "visual", fake_visual)
    win = MagicMock()
    win.size = (1280, 720)
    return presentation.PsychoPySurface(win, clock=clock)


def test_draw_expires_notification_at_given_time(surface):
    surface.apply(Notify("Starting Game 1 (N=1)", 1500))
    surface.draw(1499.0)
    assert surface.notification.text == "Starting Game 1 (N=1)"
    surface.draw(1500.0)
    assert surface.notification.text == ""


def test_draw_without_time_reads_the_clock(surface, clock):
    surface.apply(Notify("Session Started! N=1", 2000))
    clock.getTime.return_value = 2.5
    surface.draw()
    assert surface.notification.text == ""


def test_persistent_notification(surface):
    surface.apply(Notify("Press RETURN to start a session", 0))
    surface.draw(10 ** 6)
    assert surface.notification.text == "Press RETURN to start a session"


def test_render_moves_the_active_cell(surface):
    surface.apply(RenderStimulus(StimulusEvent("A", 1, 1)))
    assert surface.cells[1].fillColor == CELL_ACTIVE_COLOR
    assert surface.glyph.text == "A"
    surface.apply(RenderStimulus(StimulusEvent("3", 9, 2)))
    assert surface.cells[1].fillColor == CELL_COLOR
    assert surface.cells[9].fillColor == CELL_ACTIVE_COLOR
    surface.apply(RenderStimulus(None))
    assert surface.current is None
    assert surface.cells[9].fillColor == CELL_COLOR


def test_feedback_and_input_flags(surface):
    surface.apply(SetInputEnabled(True))
    surface.apply(Flash(False))
    assert surface.input_enabled is True
    assert surface.feedback is False
    surface.apply(ClearFeedback())
    assert surface.feedback is None


def test_unknown_command_is_rejected(surface):
    with pytest.raises(TypeError):
        surface.apply(object())
