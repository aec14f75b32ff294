from __future__ import annotations

from typing import Optional

from ResistiveTouch.calibration.models import RawSample

# Empirical limits for the TSC2046 noise floor; other controllers need their own
XY_TOLERANCE = 40
PRESSURE_TOLERANCE = 10


class SampleDenoiser:
    """Accept a tick only when two back-to-back reads agree.

    The second read is kept because the first one after a command switch
    carries more noise. On disagreement the previous sample is retained.
    """

    def __init__(self, xy_tolerance: int = XY_TOLERANCE, pressure_tolerance: int = PRESSURE_TOLERANCE) -> None:
        self.xy_tolerance = int(xy_tolerance)
        self.pressure_tolerance = int(pressure_tolerance)

    def agrees(self, first: RawSample, second: RawSample) -> bool:
        return (
            abs(first.x - second.x) < self.xy_tolerance
            and abs(first.y - second.y) < self.xy_tolerance
            and abs(first.pressure - second.pressure) < self.pressure_tolerance
        )

    def accept(self, prev: Optional[RawSample], first: RawSample, second: RawSample) -> Optional[RawSample]:
        if self.agrees(first, second):
            return second
        return prev
