"""
Active calibration matrix and its shared holder.

CalibrationMatrix is immutable. The sampling loop reads
``CalibrationState.current`` once per tick and the calibration flow swaps in a
whole new matrix, so a reader sees either the old or the new coefficients,
never a mix.
"""
from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .models import AffineParameters, Point2D

NAN = float("nan")
COEFFICIENTS = ("a", "b", "c", "d", "e", "f")


@dataclass(frozen=True)
class CalibrationMatrix:
    a: float = NAN
    b: float = NAN
    c: float = NAN
    d: float = NAN
    e: float = NAN
    f: float = NAN
    last_updated: datetime = field(default=datetime.min)

    def __post_init__(self) -> None:
        values = [float(getattr(self, k)) for k in COEFFICIENTS]
        # Either every coefficient is finite or the whole matrix is invalid
        if not all(math.isfinite(v) for v in values):
            values = [NAN] * len(COEFFICIENTS)
        for name, value in zip(COEFFICIENTS, values):
            object.__setattr__(self, name, value)

    @classmethod
    def invalid(cls) -> "CalibrationMatrix":
        return cls()

    @classmethod
    def from_parameters(cls, params: AffineParameters, when: Optional[datetime] = None) -> "CalibrationMatrix":
        return cls(
            params.a, params.b, params.c, params.d, params.e, params.f,
            last_updated=when if when is not None else datetime.now(),
        )

    @property
    def valid(self) -> bool:
        return not any(math.isnan(getattr(self, k)) for k in COEFFICIENTS)

    def coefficients(self) -> tuple:
        return tuple(getattr(self, k) for k in COEFFICIENTS)

    def transform(self, point: Point2D) -> Point2D:
        x, y = point
        return Point2D(
            self.a * x + self.b * y + self.c,
            self.d * x + self.e * y + self.f,
        )


def matrix_to_record(matrix: CalibrationMatrix) -> Dict[str, Any]:
    if not matrix.valid:
        raise ValueError("cannot serialize an invalid calibration matrix")
    record: Dict[str, Any] = {"last_updated": matrix.last_updated.isoformat()}
    for k in COEFFICIENTS:
        record[k] = float(getattr(matrix, k))
    return record


def matrix_from_record(record: Mapping[str, Any]) -> CalibrationMatrix:
    """Build a matrix from a persisted record.

    Raises ValueError/TypeError/KeyError on a malformed or incomplete record;
    nothing is partially applied since the result is a fresh value.
    """
    if not isinstance(record, Mapping):
        raise TypeError("calibration record must be a mapping")
    when = datetime.fromisoformat(str(record["last_updated"]))
    values = []
    for k in COEFFICIENTS:
        v = record[k]
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise TypeError(f"coefficient {k!r} is not a number")
        v = float(v)
        if not math.isfinite(v):
            raise ValueError(f"coefficient {k!r} is not finite")
        values.append(v)
    return CalibrationMatrix(*values, last_updated=when)


class CalibrationState:
    """Holder for the current matrix snapshot.

    Reads are a single attribute load. Writers serialize on a lock and bump
    ``generation`` so readers can tell when the matrix changed.
    """

    def __init__(self, matrix: Optional[CalibrationMatrix] = None) -> None:
        self._snapshot = (0, matrix if matrix is not None else CalibrationMatrix.invalid())
        self._write_lock = threading.Lock()

    @property
    def current(self) -> CalibrationMatrix:
        return self._snapshot[1]

    @property
    def generation(self) -> int:
        return self._snapshot[0]

    def snapshot(self) -> tuple:
        """Return (generation, matrix) read together."""
        return self._snapshot

    def replace(self, matrix: CalibrationMatrix) -> int:
        with self._write_lock:
            generation = self._snapshot[0] + 1
            self._snapshot = (generation, matrix)
            return generation
