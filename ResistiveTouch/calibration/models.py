"""
Calibration data models.

The same Point2D shape is used for raw sensor coordinates and calibrated
screen coordinates; which one a point holds depends on the stage that
produced it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class Point2D(NamedTuple):
    x: float
    y: float


class RawSample(NamedTuple):
    x: int
    y: int
    pressure: int  # sensor-native units, not normalized


@dataclass
class CalibrationPair:
    reference: Point2D  # prompted screen location
    measured: Point2D   # raw sensor reading captured for it


@dataclass(frozen=True)
class AffineParameters:
    """Six-parameter affine map from raw to screen coordinates.

    screen_x = a * raw_x + b * raw_y + c
    screen_y = d * raw_x + e * raw_y + f

    ``residual`` is sqrt(sum of squared misfits) / point count, in screen units.
    """

    a: float
    b: float
    c: float
    d: float
    e: float
    f: float
    residual: float = 0.0

    def transform(self, point: Point2D) -> Point2D:
        x, y = point
        return Point2D(
            self.a * x + self.b * y + self.c,
            self.d * x + self.e * y + self.f,
        )

    def coefficients(self) -> tuple:
        return (self.a, self.b, self.c, self.d, self.e, self.f)
