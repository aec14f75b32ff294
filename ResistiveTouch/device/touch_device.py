"""
Touch device handle.

Owned by the application and passed explicitly to the polling loop and the
calibration flow. Construction does no I/O; the raw read callable is supplied
by whatever owns the bus.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ResistiveTouch.calibration.matrix import CalibrationMatrix, CalibrationState
from ResistiveTouch.calibration.models import AffineParameters, Point2D, RawSample
from ResistiveTouch.tracking.denoise import SampleDenoiser
from ResistiveTouch.tracking.mapping import NO_POSITION, CoordinateMapper

log = logging.getLogger(__name__)

MAX_PRESSURE = 255


class TouchDevice:
    def __init__(
        self,
        read_sample: Callable[[], RawSample],
        denoiser: Optional[SampleDenoiser] = None,
        state: Optional[CalibrationState] = None,
        max_pressure: int = MAX_PRESSURE,
    ) -> None:
        if max_pressure <= 0:
            raise ValueError("max_pressure must be positive")
        self._read_sample = read_sample
        self.denoiser = denoiser if denoiser is not None else SampleDenoiser()
        self.state = state if state is not None else CalibrationState()
        self.mapper = CoordinateMapper()
        self.max_pressure = int(max_pressure)
        self._sample: Optional[RawSample] = None
        self._position: Point2D = NO_POSITION

    # Sampling ---------------------------------------------------------
    def read_touchpoints(self) -> None:
        """Take two raw reads, keep the second if they agree, and remap."""
        first = self._read_sample()
        second = self._read_sample()
        self._sample = self.denoiser.accept(self._sample, first, second)
        self._position = self.mapper.transform(self.state.current, self.raw_position)

    @property
    def sample(self) -> Optional[RawSample]:
        return self._sample

    @property
    def raw_position(self) -> Point2D:
        if self._sample is None:
            return NO_POSITION
        return Point2D(float(self._sample.x), float(self._sample.y))

    @property
    def position(self) -> Point2D:
        """Calibrated position as of the last read; (nan, nan) when uncalibrated."""
        return self._position

    @property
    def raw_pressure(self) -> int:
        return self._sample.pressure if self._sample is not None else 0

    @property
    def pressure(self) -> float:
        p = self.raw_pressure / float(self.max_pressure)
        return max(0.0, min(1.0, p))

    # Calibration ------------------------------------------------------
    @property
    def calibration(self) -> CalibrationMatrix:
        return self.state.current

    @property
    def is_calibrated(self) -> bool:
        return self.state.current.valid

    def set_matrix(self, matrix: CalibrationMatrix) -> None:
        self.state.replace(matrix)
        if matrix.valid:
            log.info("Calibration installed: %s", ", ".join(f"{v:.6g}" for v in matrix.coefficients()))
        else:
            log.info("Calibration cleared")

    def set_calibration(self, params: AffineParameters, when: Optional[datetime] = None) -> CalibrationMatrix:
        matrix = CalibrationMatrix.from_parameters(params, when)
        self.set_matrix(matrix)
        return matrix
