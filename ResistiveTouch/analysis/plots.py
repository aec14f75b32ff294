from __future__ import annotations

from typing import List

import numpy as np  # type: ignore
import matplotlib
matplotlib.use("Agg")  # headless-safe backend
import matplotlib.pyplot as plt  # type: ignore

from .error_metrics import PointError, compute_error_distribution, residual_vectors


def fig_scatter(errors: List[PointError]):
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.set_title("Calibration Fit")
    if errors:
        tp = np.array([e.reference for e in errors], dtype=float)
        pp = np.array([e.predicted for e in errors], dtype=float)
        ax.scatter(tp[:, 0], tp[:, 1], c="green", label="Target")
        ax.scatter(pp[:, 0], pp[:, 1], c="red", marker="x", label="Fitted")
    for e in errors:
        ax.plot([e.reference[0], e.predicted[0]], [e.reference[1], e.predicted[1]], c="orange", linewidth=1)
        ax.text(e.predicted[0], e.predicted[1], f"{e.dist_px:.1f} px", fontsize=8, color="orange")
    ax.legend(loc="best")
    ax.set_xlabel("X (px)")
    ax.set_ylabel("Y (px)")
    ax.invert_yaxis()  # screen coordinates origin top-left
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def fig_vectors(errors: List[PointError]):
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.set_title("Calibration Residual Vectors")
    if not errors:
        fig.tight_layout()
        return fig
    tp = np.array([e.reference for e in errors], dtype=float)
    dx, dy = residual_vectors(errors).T
    # Residuals are a few px on a full screen; scale them up to be visible
    mag = np.sqrt(dx * dx + dy * dy) + 1e-6
    scale = np.clip(50.0 / np.max(mag), 1.0, 200.0)
    ax.quiver(tp[:, 0], tp[:, 1], dx * scale, dy * scale, angles="xy", scale_units="xy", scale=1, color="red")
    ax.scatter(tp[:, 0], tp[:, 1], c="green", label="Target")
    ax.legend(loc="best")
    ax.set_xlabel(f"X (px), vectors x{scale:.0f}")
    ax.set_ylabel("Y (px)")
    ax.invert_yaxis()
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def fig_histogram(errors: List[PointError], bin_width_px: float = 1.0):
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.set_title("Error Distribution")
    hist, edges = compute_error_distribution(errors, bin_width_px)
    if errors:
        ax.bar(edges[:-1], hist, width=np.diff(edges), align="edge", color="steelblue", edgecolor="black", alpha=0.8)
    ax.set_xlabel("Error (px)")
    ax.set_ylabel("Count")
    fig.tight_layout()
    return fig


def fig_summary(mean_px: float, max_px: float, rms_px: float, residual: float):
    fig, ax = plt.subplots(figsize=(4, 3))
    ax.axis("off")
    text = f"Mean: {mean_px:.2f} px\nMax: {max_px:.2f} px\nRMS: {rms_px:.2f} px\ns0: {residual:.3f}"
    ax.text(0.1, 0.8, text, fontsize=14, va="top")
    fig.tight_layout()
    return fig
