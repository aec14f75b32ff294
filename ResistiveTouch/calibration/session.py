"""
Calibration run over a fixed target pattern.

Targets, in prompt order (W x H screen, m = margin):
  top-left (m, m), [top-center (W/2, m)], top-right (W-m, m),
  bottom-right (W-m, H-m), [bottom-center (W/2, H-m)], bottom-left (m, H-m),
  [center (W/2, H/2)]

Top/bottom centers only for SEVEN_POINT; center for CORNERS_AND_CENTER and
SEVEN_POINT. Normal touch sampling must be suspended by the caller for the
duration of run().
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, List, Optional, Tuple

from .capture import CalibrationPointCapture, SampleSource
from .models import AffineParameters, CalibrationPair, Point2D
from .solver import solve_pairs

log = logging.getLogger(__name__)

DEFAULT_MARGIN = 50.0


class CalibrationPattern(enum.Enum):
    FOUR_CORNERS = 4
    CORNERS_AND_CENTER = 5
    SEVEN_POINT = 7

    @classmethod
    def parse(cls, value) -> "CalibrationPattern":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        key = str(value).strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown calibration pattern: {value!r}") from None


Prompt = Callable[[Point2D], None]


def reference_points(pattern: CalibrationPattern, screen_bounds: Tuple[float, float], margin: float = DEFAULT_MARGIN) -> List[Point2D]:
    w, h = float(screen_bounds[0]), float(screen_bounds[1])
    if w <= 0 or h <= 0:
        raise ValueError("screen dimensions must be positive")
    m = float(margin)
    seven = pattern is CalibrationPattern.SEVEN_POINT
    pts = [Point2D(m, m)]
    if seven:
        pts.append(Point2D(w * 0.5, m))
    pts.append(Point2D(w - m, m))
    pts.append(Point2D(w - m, h - m))
    if seven:
        pts.append(Point2D(w * 0.5, h - m))
    pts.append(Point2D(m, h - m))
    if pattern in (CalibrationPattern.CORNERS_AND_CENTER, CalibrationPattern.SEVEN_POINT):
        pts.append(Point2D(w * 0.5, h * 0.5))
    return pts


class CalibrationSession:
    def __init__(self, source: SampleSource, prompt: Prompt, capture: Optional[CalibrationPointCapture] = None) -> None:
        self.source = source
        self.prompt = prompt
        self.capture = capture if capture is not None else CalibrationPointCapture()
        self.pairs: List[CalibrationPair] = []

    def run(
        self,
        pattern: CalibrationPattern,
        screen_bounds: Tuple[float, float],
        margin: float = DEFAULT_MARGIN,
        cancel: Optional[threading.Event] = None,
    ) -> AffineParameters:
        targets = reference_points(pattern, screen_bounds, margin)
        self.pairs = []
        log.info("Calibration started: %s, %d targets", pattern.name, len(targets))
        for i, target in enumerate(targets):
            self.prompt(target)
            raw = self.capture.capture_one(self.source, cancel)
            self.pairs.append(CalibrationPair(reference=target, measured=raw))
            log.debug("Target %d/%d at %s -> raw %s", i + 1, len(targets), target, raw)
        params = solve_pairs(self.pairs)
        log.info("Calibration solved, residual %.3f px", params.residual)
        return params
