from __future__ import annotations

import csv
import os
import sys
from typing import List, Optional

from ResistiveTouch.calibration.errors import CalibrationError
from ResistiveTouch.calibration.models import AffineParameters, CalibrationPair, Point2D
from ResistiveTouch.calibration.solver import solve_pairs
from ResistiveTouch.core.log import setup_logger
from .error_metrics import (
    PointError,
    compute_max_error,
    compute_mean_error,
    compute_point_errors,
    compute_rms_error,
)


def load_csv(path: str) -> List[CalibrationPair]:
    """Read recorded pairs from a CSV with columns ref_x, ref_y, raw_x, raw_y."""
    pairs: List[CalibrationPair] = []
    with open(path, newline="", encoding="utf-8") as f:
        r = csv.DictReader(f)
        for row in r:
            ref = Point2D(float(row["ref_x"]), float(row["ref_y"]))
            raw = Point2D(float(row["raw_x"]), float(row["raw_y"]))
            pairs.append(CalibrationPair(reference=ref, measured=raw))
    return pairs


def summarize(pairs: List[CalibrationPair], params: AffineParameters) -> List[PointError]:
    errors = compute_point_errors(pairs, params)
    print(f"Points:     {len(pairs)}")
    print(f"a={params.a:.6g} b={params.b:.6g} c={params.c:.6g}")
    print(f"d={params.d:.6g} e={params.e:.6g} f={params.f:.6g}")
    print(f"s0:         {params.residual:.4f}")
    print(f"Mean error: {compute_mean_error(errors):.2f}px")
    print(f"RMS error:  {compute_rms_error(errors):.2f}px")
    print(f"Max error:  {compute_max_error(errors):.2f}px")
    return errors


def export_figures(errors: List[PointError], params: AffineParameters, out_dir: str) -> List[str]:
    """Write the fit plots as PNGs into out_dir and return their paths."""
    # pulls in matplotlib; only needed when exporting
    import matplotlib.pyplot as plt  # type: ignore
    from .plots import fig_histogram, fig_scatter, fig_summary, fig_vectors

    os.makedirs(out_dir, exist_ok=True)
    figures = {
        "scatter": fig_scatter(errors),
        "vectors": fig_vectors(errors),
        "histogram": fig_histogram(errors),
        "summary": fig_summary(
            compute_mean_error(errors), compute_max_error(errors), compute_rms_error(errors), params.residual
        ),
    }
    paths: List[str] = []
    for name, fig in figures.items():
        path = os.path.join(out_dir, f"calibration_{name}.png")
        fig.savefig(path, dpi=150)
        plt.close(fig)
        paths.append(path)
    return paths


def main(argv: List[str]) -> int:
    if len(argv) < 2:
        print("Usage: python -m ResistiveTouch.analysis.eval_csv <path-to-csv> [png-output-dir]")
        return 2
    setup_logger(level="WARNING")
    try:
        pairs = load_csv(argv[1])
    except (OSError, KeyError, TypeError, ValueError) as e:
        print(f"Could not read {argv[1]}: {e!r}")
        return 2
    try:
        params = solve_pairs(pairs)
    except CalibrationError as e:
        print(f"Calibration failed: {e}")
        return 1
    errors = summarize(pairs, params)
    out_dir: Optional[str] = argv[2] if len(argv) > 2 else None
    if out_dir:
        for path in export_figures(errors, params, out_dir):
            print(f"Wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
