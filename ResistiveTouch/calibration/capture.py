"""
Single calibration touch capture.

Protocol, polling every ``poll_interval_s``:
1. wait while the pen is still down (a stale touch from before the prompt)
2. wait until a new press starts
3. follow the raw position while pressed and return the last one seen before
   release. Users tend to settle onto the target after first contact, so the
   last position is steadier than the first.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Protocol

from .errors import CalibrationCancelled
from .models import Point2D

log = logging.getLogger(__name__)

CAPTURE_THRESHOLD = 0.1
POLL_INTERVAL_S = 0.005


class SampleSource(Protocol):
    def read_touchpoints(self) -> None: ...

    @property
    def pressure(self) -> float: ...

    @property
    def raw_position(self) -> Point2D: ...


class CalibrationPointCapture:
    def __init__(
        self,
        threshold: float = CAPTURE_THRESHOLD,
        poll_interval_s: float = POLL_INTERVAL_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.threshold = float(threshold)
        self.poll_interval_s = float(poll_interval_s)
        self._sleep = sleep

    def _poll(self, source: SampleSource, cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise CalibrationCancelled("calibration capture cancelled")
        self._sleep(self.poll_interval_s)
        source.read_touchpoints()

    def capture_one(self, source: SampleSource, cancel: Optional[threading.Event] = None) -> Point2D:
        while source.pressure >= self.threshold:
            self._poll(source, cancel)
        log.debug("Capture: released, waiting for press")
        while source.pressure < self.threshold:
            self._poll(source, cancel)
        point = source.raw_position
        log.debug("Capture: pressed at raw %s", point)
        while source.pressure >= self.threshold:
            point = source.raw_position
            self._poll(source, cancel)
        log.debug("Capture: released at raw %s", point)
        return Point2D(float(point[0]), float(point[1]))
