"""
Holdout splitting utilities for the labeled training partition.

The test partition carries no labels, so models are scored and the
ensemble threshold is tuned on a holdout slice of the training rows. The
split is configured by the "split" section of config/data.yaml.

We rely on scikit-learn's train_test_split and support:
- stratified splitting on the label column
- configurable holdout_size and random_state
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np
from sklearn.model_selection import train_test_split


def holdout_indices(
    labels: np.ndarray,
    split_cfg: Dict[str, Any],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split row positions of the training partition into fit and holdout sets.

    Parameters
    ----------
    labels : np.ndarray
        Binary labels of the training partition, in row order.
    split_cfg : Dict[str, Any]
        The "split" section of the data configuration.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (fit_idx, holdout_idx), each sorted ascending.

    Raises
    ------
    ValueError
        If stratified splitting is requested but the label distribution
        is incompatible (e.g., only one class present).
    """
    labels = np.asarray(labels)
    holdout_size = float(split_cfg.get("holdout_size", 0.2))
    stratify_enabled = bool(split_cfg.get("stratify", True))
    random_state = int(split_cfg.get("random_state", 42))

    if stratify_enabled and np.unique(labels).size < 2:
        raise ValueError(
            f"Stratified holdout split needs both classes; got labels {np.unique(labels).tolist()}"
        )

    positions = np.arange(len(labels))
    fit_idx, holdout_idx = train_test_split(
        positions,
        test_size=holdout_size,
        random_state=random_state,
        stratify=labels if stratify_enabled else None,
        shuffle=True,
    )
    return np.sort(fit_idx), np.sort(holdout_idx)
