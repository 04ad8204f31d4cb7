"""Tests for the simulated-time timer queue."""

import pytest

from dualnback.timers import TimerQueue


def test_fires_in_deadline_order():
    q = TimerQueue()
    fired = []
    q.call_later(300, lambda: fired.append("c"))
    q.call_later(100, lambda: fired.append("a"))
    q.call_later(200, lambda: fired.append("b"))
    assert q.advance_to(250) == 2
    assert fired == ["a", "b"]
    q.advance_to(300)
    assert fired == ["a", "b", "c"]


def test_equal_deadlines_fire_in_creation_order():
    q = TimerQueue()
    fired = []
    for name in "xyz":
        q.call_later(50, lambda name=name: fired.append(name))
    q.advance(50)
    assert fired == ["x", "y", "z"]


def test_clock_reads_deadline_inside_callback():
    q = TimerQueue()
    seen = []
    q.call_later(1000, lambda: seen.append(q.now_ms))
    q.advance_to(5000)
    assert seen == [1000]
    assert q.now_ms == 5000


def test_callbacks_can_chain_within_one_advance():
    q = TimerQueue()
    fired = []

    def tick():
        fired.append(q.now_ms)
        if len(fired) < 4:
            q.call_later(2500, tick)

    q.call_later(0, tick)
    q.advance_to(10000)
    assert fired == [0, 2500, 5000, 7500]


def test_cancel_and_cancel_all():
    q = TimerQueue()
    fired = []
    t = q.call_later(10, lambda: fired.append(1))
    q.call_later(20, lambda: fired.append(2))
    q.cancel(t)
    assert q.pending == 1
    assert q.next_deadline == 20
    q.cancel_all()
    assert q.pending == 0
    assert q.next_deadline is None
    q.advance(100)
    assert fired == []


def test_clock_cannot_go_backwards():
    q = TimerQueue(start_ms=100)
    with pytest.raises(ValueError):
        q.advance_to(50)
    with pytest.raises(ValueError):
        q.call_later(-1, lambda: None)
