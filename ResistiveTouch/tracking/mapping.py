"""
Coordinate mapping utilities.

CoordinateMapper maps raw sensor coordinates to screen pixels through the
active calibration matrix. An uncalibrated device yields (nan, nan) so it can
never report a plausible-looking but wrong position. No clamping happens
here; callers decide what to do with off-screen points.
"""
from __future__ import annotations

import math

from ResistiveTouch.calibration.matrix import CalibrationMatrix
from ResistiveTouch.calibration.models import Point2D

NO_POSITION = Point2D(float("nan"), float("nan"))


def is_position(point: Point2D) -> bool:
    """True when both coordinates are usable (finite)."""
    return math.isfinite(point[0]) and math.isfinite(point[1])


class CoordinateMapper:
    """
    Map raw (x, y) to screen (x, y).

    Notes:
    - Stateless; the matrix is passed per call so the sampling loop can hand
      in the snapshot it read at the start of the tick.
    - NaN output means "no position available", not a math error.
    """

    def transform(self, matrix: CalibrationMatrix, raw: Point2D) -> Point2D:
        if not matrix.valid:
            return NO_POSITION
        return matrix.transform(raw)
