import pytest

from ResistiveTouch.calibration.models import Point2D
from ResistiveTouch.control.events import EventPhase, PointerPhase
from ResistiveTouch.tracking.debounce import PointerDebouncer

POS = Point2D(10.0, 20.0)


def _phases(debouncer, pressures):
    out = []
    for p in pressures:
        ev = debouncer.update(p, POS)
        out.append(ev.phase if ev is not None else None)
    return out


def test_hysteresis_sequence_with_default_thresholds():
    d = PointerDebouncer()
    assert d.release_threshold == pytest.approx(2.0 / 255.0)
    assert _phases(d, [0, 0.03, 0.03, 0.015, 0]) == [
        None, EventPhase.DOWN, EventPhase.MOVE, None, EventPhase.UP,
    ]
    assert d.phase is PointerPhase.UP


def test_no_chatter_inside_dead_band():
    d = PointerDebouncer()
    seq = [0.03, 0.015, 0.03, 0.010, 0.021, 0.008, 0.025]
    assert _phases(d, seq) == [
        EventPhase.DOWN, None, EventPhase.MOVE, None, EventPhase.MOVE, None, EventPhase.MOVE,
    ]
    assert d.phase is PointerPhase.DOWN


def test_move_emitted_every_tick_while_pressed():
    d = PointerDebouncer()
    assert _phases(d, [0.5] * 4) == [EventPhase.DOWN] + [EventPhase.MOVE] * 3


def test_press_threshold_is_exclusive():
    d = PointerDebouncer(press_threshold=0.5, release_distance=0.25)
    assert d.update(0.5, POS) is None
    assert d.phase is PointerPhase.UP
    assert d.update(0.5001, POS).phase is EventPhase.DOWN
    # exactly at the release threshold stays down
    assert d.update(0.25, POS) is None
    assert d.phase is PointerPhase.DOWN
    assert d.update(0.2499, POS).phase is EventPhase.UP


def test_event_carries_position_and_pressure():
    d = PointerDebouncer()
    ev = d.update(0.4, Point2D(1.5, 2.5))
    assert ev.position == Point2D(1.5, 2.5)
    assert ev.pressure == pytest.approx(0.4)
    up = d.update(0.0, Point2D(3.0, 4.0))
    assert up.phase is EventPhase.UP
    assert up.position == Point2D(3.0, 4.0)


def test_reset_returns_to_up():
    d = PointerDebouncer()
    d.update(0.5, POS)
    d.reset()
    assert d.phase is PointerPhase.UP
    assert d.update(0.5, POS).phase is EventPhase.DOWN


@pytest.mark.parametrize("press,release", [(0.0, 0.01), (1.0, 0.01), (0.02, 0.0), (0.02, 0.02), (0.02, 0.5)])
def test_invalid_thresholds_rejected(press, release):
    with pytest.raises(ValueError):
        PointerDebouncer(press_threshold=press, release_distance=release)
