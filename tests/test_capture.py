import threading

import pytest

from ResistiveTouch.calibration.capture import CalibrationPointCapture
from ResistiveTouch.calibration.errors import CalibrationCancelled
from ResistiveTouch.calibration.models import Point2D

from fakes import ScriptedSource


def _capture(sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return CalibrationPointCapture(sleep=sleeps.append)


def test_waits_for_stale_release_then_tracks_last_position():
    src = ScriptedSource([
        (0.5, (900, 900)),   # stale touch still down
        (0.5, (905, 900)),
        (0.0, (0, 0)),       # released
        (0.0, (0, 0)),
        (0.3, (100, 100)),   # new press
        (0.4, (105, 102)),
        (0.35, (110, 104)),  # last position before release
        (0.0, (0, 0)),
    ])
    sleeps = []
    p = _capture(sleeps).capture_one(src)
    assert p == Point2D(110.0, 104.0)
    assert src.reads == 7
    assert sleeps == [0.005] * 7


def test_returns_first_position_when_released_right_away():
    src = ScriptedSource([(0.0, (0, 0)), (0.6, (321, 654)), (0.05, (1, 1))])
    assert _capture().capture_one(src) == Point2D(321.0, 654.0)


def test_threshold_is_inclusive_for_pressed():
    src = ScriptedSource([(0.0, (0, 0)), (0.1, (50, 60)), (0.0999, (0, 0))])
    assert _capture().capture_one(src) == Point2D(50.0, 60.0)


def test_light_contact_below_threshold_is_ignored():
    src = ScriptedSource([
        (0.0, (0, 0)),
        (0.05, (10, 10)),  # brush, never reaches threshold
        (0.0, (0, 0)),
        (0.2, (400, 300)),
        (0.0, (0, 0)),
    ])
    assert _capture().capture_one(src) == Point2D(400.0, 300.0)


def test_cancel_stops_waiting():
    src = ScriptedSource([(0.0, (0, 0))])
    cancel = threading.Event()
    calls = []

    def sleep(s):
        calls.append(s)
        if len(calls) == 3:
            cancel.set()

    cap = CalibrationPointCapture(sleep=sleep)
    with pytest.raises(CalibrationCancelled):
        cap.capture_one(src, cancel)
    assert len(calls) == 3
