"""
Fit quality of an affine calibration over its recorded pairs.

Errors are the screen-space residual vectors ``T(measured) - reference``;
the summaries below all reduce their lengths.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np  # type: ignore

from ResistiveTouch.calibration.models import AffineParameters, CalibrationPair, Point2D


@dataclass
class PointError:
    reference: Point2D
    predicted: Point2D
    dist_px: float


def compute_point_errors(pairs: Sequence[CalibrationPair], params: AffineParameters) -> List[PointError]:
    out: List[PointError] = []
    for pair in pairs:
        pred = params.transform(pair.measured)
        dist = math.hypot(pred.x - pair.reference[0], pred.y - pair.reference[1])
        out.append(PointError(reference=Point2D(*pair.reference), predicted=pred, dist_px=dist))
    return out


def residual_vectors(errors: Sequence[PointError]) -> np.ndarray:
    """(n, 2) array of predicted minus reference."""
    if not errors:
        return np.zeros((0, 2), dtype=float)
    ref = np.array([e.reference for e in errors], dtype=float)
    pred = np.array([e.predicted for e in errors], dtype=float)
    return pred - ref


def _lengths(errors: Sequence[PointError]) -> np.ndarray:
    return np.hypot(*residual_vectors(errors).T) if errors else np.zeros(0)


def compute_mean_error(errors: Sequence[PointError]) -> float:
    d = _lengths(errors)
    return float(d.mean()) if d.size else 0.0


def compute_max_error(errors: Sequence[PointError]) -> float:
    d = _lengths(errors)
    return float(d.max()) if d.size else 0.0


def compute_rms_error(errors: Sequence[PointError]) -> float:
    d = _lengths(errors)
    return float(np.sqrt(np.mean(d * d))) if d.size else 0.0


def compute_error_distribution(errors: Sequence[PointError], bin_width_px: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """Histogram of residual lengths over [0, max(1 px, largest)], 5 to 100 bins."""
    d = _lengths(errors)
    if not d.size:
        return np.zeros(1), np.zeros(1)
    upper = max(1.0, float(d.max()))
    bins = int(np.clip(math.ceil(upper / bin_width_px), 5, 100))
    hist, edges = np.histogram(d, bins=bins, range=(0.0, upper))
    return hist.astype(float), edges.astype(float)
