from __future__ import annotations


class CalibrationError(ValueError):
    """Base class for calibration runs that cannot produce a transform."""


class LengthMismatch(CalibrationError):
    def __init__(self, references: int, measured: int) -> None:
        super().__init__(
            f"reference and measured sequences differ in length ({references} != {measured})"
        )
        self.references = references
        self.measured = measured


class InsufficientPoints(CalibrationError):
    def __init__(self, count: int, required: int = 3) -> None:
        super().__init__(f"at least {required} measurements required, got {count}")
        self.count = count
        self.required = required


class SingularSystem(CalibrationError):
    def __init__(self, determinant: float) -> None:
        super().__init__(
            "calibration points are collinear or duplicated "
            f"(determinant={determinant!r}); retry with points spread across the screen"
        )
        self.determinant = determinant


class CalibrationCancelled(RuntimeError):
    """Raised when a calibration capture is cancelled before it completes."""
