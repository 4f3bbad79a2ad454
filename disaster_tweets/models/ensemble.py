"""
Fixed-weight probability ensemble.

The ensemble averages the positive-class probabilities of its members with
fixed weights and thresholds the result:

    p = (w_1 * p_1 + ... + w_k * p_k) / (w_1 + ... + w_k)
    label = 1 if p > threshold else 0

The threshold is either fixed (0.5 by default) or chosen by a grid search
maximizing holdout accuracy.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics import accuracy_score


def weighted_average(
    probabilities: Sequence[np.ndarray],
    weights: Sequence[float],
) -> np.ndarray:
    """
    Weighted mean of several probability vectors.

    Raises
    ------
    ValueError
        If the number of weights does not match, a weight is negative, the
        weights sum to zero, or the vectors differ in length.
    """
    if len(probabilities) == 0:
        raise ValueError("At least one probability vector is required.")
    if len(probabilities) != len(weights):
        raise ValueError(
            f"Got {len(probabilities)} probability vectors but {len(weights)} weights."
        )

    w = np.asarray(weights, dtype=np.float64)
    if np.any(w < 0) or w.sum() <= 0:
        raise ValueError(f"Weights must be non-negative with a positive sum, got {list(weights)}")

    stacked = np.vstack([np.asarray(p, dtype=np.float64) for p in probabilities])
    return (w[:, None] * stacked).sum(axis=0) / w.sum()


def apply_threshold(probabilities: np.ndarray, threshold: float = 0.5) -> np.ndarray:
    return (np.asarray(probabilities) > threshold).astype(np.int64)


def threshold_grid(start: float = 0.3, stop: float = 0.7, step: float = 0.01) -> np.ndarray:
    """
    Candidate thresholds from ``start`` to ``stop`` inclusive.
    """
    if step <= 0 or stop < start:
        raise ValueError(f"Invalid threshold grid: start={start}, stop={stop}, step={step}")
    n_steps = int(round((stop - start) / step))
    # Rounded to avoid floating-point drift in the reported threshold.
    return np.round(start + step * np.arange(n_steps + 1), 10)


def tune_threshold(
    probabilities: np.ndarray,
    y_true: np.ndarray,
    grid: Optional[Sequence[float]] = None,
) -> Tuple[float, float]:
    """
    Brute-force the threshold that maximizes accuracy.

    Ties are resolved in favour of the lowest threshold.

    Returns
    -------
    Tuple[float, float]
        (best_threshold, best_accuracy)
    """
    if grid is None:
        grid = threshold_grid()

    best_threshold, best_accuracy = None, -1.0
    for threshold in grid:
        acc = accuracy_score(y_true, apply_threshold(probabilities, threshold))
        if acc > best_accuracy:
            best_threshold, best_accuracy = float(threshold), float(acc)
    return best_threshold, best_accuracy


def ensemble_settings(ml_cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Read and validate the "ensemble" section of config/ml.yaml.
    """
    ecfg = ml_cfg.get("ensemble", {}) or {}
    members = list(ecfg.get("members", ["logistic_regression", "random_forest"]))
    weights = [float(w) for w in ecfg.get("weights", [2, 1])]
    if len(members) != len(weights):
        raise ValueError(
            f"Ensemble has {len(members)} members but {len(weights)} weights: {members}, {weights}"
        )

    grid_cfg = ecfg.get("threshold_grid", {}) or {}
    return {
        "members": members,
        "weights": weights,
        "threshold": float(ecfg.get("threshold", 0.5)),
        "tune_threshold": bool(ecfg.get("tune_threshold", False)),
        "grid": threshold_grid(
            start=float(grid_cfg.get("start", 0.3)),
            stop=float(grid_cfg.get("stop", 0.7)),
            step=float(grid_cfg.get("step", 0.01)),
        ),
    }
