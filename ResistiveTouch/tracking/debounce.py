"""
Pointer press/release detection with hysteresis.

States: UP, DOWN (initial UP). With p the normalized pressure:
- UP -> DOWN when p > press_threshold: emits DOWN
- DOWN stays DOWN while p > press_threshold: emits MOVE every tick
- DOWN -> UP when p < press_threshold - release_distance: emits UP
- anything in between: no event

The gap between the two thresholds absorbs finger-pressure jitter around the
press point. It is unrelated to the raw-sample noise tolerances in denoise.py.
"""
from __future__ import annotations

from typing import Optional

from ResistiveTouch.calibration.models import Point2D
from ResistiveTouch.control.events import EventPhase, PointerEvent, PointerPhase

PRESS_THRESHOLD = 5.0 / 255.0
RELEASE_DISTANCE = 3.0 / 255.0


class PointerDebouncer:
    def __init__(self, press_threshold: float = PRESS_THRESHOLD, release_distance: float = RELEASE_DISTANCE) -> None:
        if not (0.0 < press_threshold < 1.0):
            raise ValueError("press_threshold must be in (0, 1)")
        if not (0.0 < release_distance < 1.0):
            raise ValueError("release_distance must be in (0, 1)")
        if release_distance >= press_threshold:
            raise ValueError("release_distance must be smaller than press_threshold")
        self.press_threshold = float(press_threshold)
        self.release_distance = float(release_distance)
        self._phase = PointerPhase.UP

    @property
    def release_threshold(self) -> float:
        return self.press_threshold - self.release_distance

    @property
    def phase(self) -> PointerPhase:
        return self._phase

    def reset(self) -> None:
        self._phase = PointerPhase.UP

    def update(self, pressure: float, position: Point2D) -> Optional[PointerEvent]:
        p = float(pressure)
        if self._phase is PointerPhase.UP:
            if p > self.press_threshold:
                self._phase = PointerPhase.DOWN
                return PointerEvent(EventPhase.DOWN, position, p)
            return None
        if p > self.press_threshold:
            return PointerEvent(EventPhase.MOVE, position, p)
        if p < self.release_threshold:
            self._phase = PointerPhase.UP
            return PointerEvent(EventPhase.UP, position, p)
        return None
