import pytest

from skyswarm.core.clock import SimClock
from skyswarm.core.events import EventLog
from skyswarm.core.state import ElectionEvent, EventKind


def test_periodic_timer_fires_each_period():
    clock = SimClock()
    fired = []
    clock.every("tick", 50, fired.append)
    clock.advance(200)
    assert fired == [50, 100, 150, 200]
    assert clock.now == 200


def test_one_shot_fires_once():
    clock = SimClock()
    fired = []
    clock.call_later(120, fired.append)
    clock.advance(1000)
    assert fired == [120]


def test_same_instant_fires_in_schedule_order():
    clock = SimClock()
    order = []
    clock.call_later(100, lambda t: order.append("first"))
    clock.every("tick", 100, lambda t: order.append("tick"))
    clock.call_later(100, lambda t: order.append("second"))
    clock.advance(100)
    assert order == ["first", "tick", "second"]


def test_cancel_and_rearm():
    clock = SimClock()
    fired = []
    clock.every("tick", 50, fired.append)
    clock.advance(100)
    clock.cancel("tick")
    clock.advance(500)
    assert fired == [50, 100]
    assert not clock.is_armed("tick")
    clock.every("tick", 50, fired.append)
    clock.advance(50)
    assert fired == [50, 100, 650]


def test_callback_can_schedule_more_work():
    clock = SimClock()
    fired = []

    def first(t):
        fired.append(("first", t))
        clock.call_later(10, lambda t2: fired.append(("second", t2)))

    clock.call_later(5, first)
    clock.advance(100)
    assert fired == [("first", 5), ("second", 15)]


def test_rejects_non_positive_period():
    with pytest.raises(ValueError):
        SimClock().every("tick", 0, lambda t: None)


def test_event_log_newest_first_and_bounded():
    log = EventLog(max_events=3)
    for i in range(5):
        log.append(ElectionEvent(float(i), EventKind.VOTE, f"e{i}"))
    assert [e.details for e in log] == ["e4", "e3", "e2"]
    assert len(log) == 3
    assert log.latest().details == "e4"
    assert len(log.of_kind(EventKind.VOTE)) == 3
