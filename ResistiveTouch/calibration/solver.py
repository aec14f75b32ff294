"""Least-squares affine calibration.

Each measurement contributes a row ``[x, y, -1]`` (raw coordinates) to the
design matrix B. The normal matrix ``N = Bᵗ·B`` is always 3x3, so both axes are
solved in closed form with the same cofactor expansion and the cost grows only
linearly with the number of points. Every point is weighted equally.

Based on Mikhail, "Introduction to Modern Photogrammetry", extended to an
arbitrary number of points.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Sequence, Tuple

import numpy as np

from .errors import InsufficientPoints, LengthMismatch, SingularSystem
from .models import AffineParameters, CalibrationPair, Point2D

log = logging.getLogger(__name__)

MIN_POINTS = 3
# |det(N)| below this fraction of the diagonal product is treated as singular
SINGULAR_RTOL = 1e-12

Vector3 = Tuple[float, float, float]


def _normal_equations(references: np.ndarray, measured: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    x = measured[:, 0]
    y = measured[:, 1]
    rx = references[:, 0]
    ry = references[:, 1]
    sx = float(np.sum(x))
    sy = float(np.sum(y))
    n = np.array(
        [
            [float(np.sum(x * x)), float(np.sum(x * y)), -sx],
            [float(np.sum(x * y)), float(np.sum(y * y)), -sy],
            [-sx, -sy, float(len(x))],
        ],
        dtype=float,
    )
    t1 = np.array([float(np.sum(x * rx)), float(np.sum(y * rx)), -float(np.sum(rx))], dtype=float)
    t2 = np.array([float(np.sum(x * ry)), float(np.sum(y * ry)), -float(np.sum(ry))], dtype=float)
    return n, t1, t2


def _cofactors(n: np.ndarray) -> Tuple[float, float, float, float, float, float]:
    # N is symmetric, so its adjugate is symmetric too: six distinct entries
    n00, n01, n02 = n[0]
    n11, n12 = n[1][1], n[1][2]
    n22 = n[2][2]
    c00 = n11 * n22 - n12 * n12
    c01 = n02 * n12 - n01 * n22
    c02 = n01 * n12 - n11 * n02
    c11 = n00 * n22 - n02 * n02
    c12 = n01 * n02 - n00 * n12
    c22 = n00 * n11 - n01 * n01
    return float(c00), float(c01), float(c02), float(c11), float(c12), float(c22)


def _back_substitute(cof: Tuple[float, ...], t: np.ndarray, frac: float) -> Vector3:
    c00, c01, c02, c11, c12, c22 = cof
    t0, t1, t2 = float(t[0]), float(t[1]), float(t[2])
    p0 = (c00 * t0 + c01 * t1 + c02 * t2) * frac
    p1 = (c01 * t0 + c11 * t1 + c12 * t2) * frac
    p2 = (c02 * t0 + c12 * t1 + c22 * t2) * frac
    return p0, p1, p2


def residual_s0(params: AffineParameters, references: Sequence[Point2D], measured: Sequence[Point2D]) -> float:
    """sqrt(sum of squared distances between prediction and reference) / count."""
    if not references:
        return 0.0
    total = 0.0
    for ref, raw in zip(references, measured):
        px, py = params.transform(raw)
        total += (px - ref[0]) ** 2 + (py - ref[1]) ** 2
    return math.sqrt(total) / len(references)


def solve(references: Sequence[Point2D], measured: Sequence[Point2D]) -> AffineParameters:
    """Fit screen = T(raw) to index-aligned reference/measured point sequences.

    Raises LengthMismatch, InsufficientPoints or SingularSystem.
    """
    if len(references) != len(measured):
        raise LengthMismatch(len(references), len(measured))
    count = len(references)
    if count < MIN_POINTS:
        raise InsufficientPoints(count, MIN_POINTS)

    refs = np.asarray([(float(p[0]), float(p[1])) for p in references], dtype=float)
    raws = np.asarray([(float(p[0]), float(p[1])) for p in measured], dtype=float)
    n, t1, t2 = _normal_equations(refs, raws)

    cof = _cofactors(n)
    det = float(n[0][0] * cof[0] + n[0][1] * cof[1] + n[0][2] * cof[2])
    scale = abs(float(n[0][0] * n[1][1] * n[2][2]))
    if det == 0.0 or not math.isfinite(det) or abs(det) <= SINGULAR_RTOL * scale:
        log.warning("Calibration rejected: singular normal matrix (det=%r, %d points)", det, count)
        raise SingularSystem(det)
    frac = 1.0 / det
    if not math.isfinite(frac):
        raise SingularSystem(det)

    a, b, neg_c = _back_substitute(cof, t1, frac)
    d, e, neg_f = _back_substitute(cof, t2, frac)
    params = AffineParameters(a=a, b=b, c=-neg_c, d=d, e=e, f=-neg_f)
    s0 = residual_s0(params, references, measured)
    result = replace(params, residual=s0)
    if not all(math.isfinite(v) for v in result.coefficients()):
        raise SingularSystem(det)
    log.debug("Affine fit over %d points, residual %.4f", count, s0)
    return result


def solve_pairs(pairs: Sequence[CalibrationPair]) -> AffineParameters:
    return solve([p.reference for p in pairs], [p.measured for p in pairs])
