"""
Evaluation metrics for disaster-tweet classification.

This module centralizes the computation of the classification metrics
reported for every classifier and for the ensemble on the holdout split:

- accuracy
- precision
- recall
- F1-score
- confusion matrix

Models hand over positive-class probabilities, so ``holdout_report`` applies
the decision threshold first and records it next to the scores.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    precision_recall_fscore_support,
)

from disaster_tweets.models.ensemble import apply_threshold


ArrayLike = Union[Sequence[int], np.ndarray]


def compute_classification_metrics(
    y_true: ArrayLike,
    y_pred: ArrayLike,
    average: str = "binary",
    labels: Optional[Sequence[int]] = (0, 1),
    output_confusion_matrix: bool = True,
) -> Dict[str, Any]:
    """
    Compute standard classification metrics for a predicted label set.

    Parameters
    ----------
    y_true : ArrayLike
        Ground-truth labels (0 = not a disaster, 1 = disaster).
    y_pred : ArrayLike
        Predicted labels, same shape as y_true.
    average : str
        Averaging mode for precision/recall/F1 ("binary", "macro", ...).
    labels : Optional[Sequence[int]]
        Label order of the confusion matrix. Fixed to (0, 1) by default so
        the matrix is always 2x2, even if one class is absent.
    output_confusion_matrix : bool
        If True, also compute and include the confusion matrix.

    Returns
    -------
    Dict[str, Any]
        Keys "accuracy", "precision", "recall", "f1" and, optionally,
        "confusion_matrix" (nested list).
    """
    y_true_arr = np.asarray(y_true)
    y_pred_arr = np.asarray(y_pred)

    acc = accuracy_score(y_true_arr, y_pred_arr)
    prec, rec, f1, _ = precision_recall_fscore_support(
        y_true_arr,
        y_pred_arr,
        average=average,
        zero_division=0,
    )

    metrics: Dict[str, Any] = {
        "accuracy": float(acc),
        "precision": float(prec),
        "recall": float(rec),
        "f1": float(f1),
    }

    if output_confusion_matrix:
        cm = confusion_matrix(
            y_true_arr, y_pred_arr, labels=list(labels) if labels is not None else None
        )
        # Plain list for JSON/CSV friendliness
        metrics["confusion_matrix"] = cm.tolist()

    return metrics


def holdout_report(
    model_name: str,
    y_true: ArrayLike,
    probabilities: ArrayLike,
    threshold: float = 0.5,
) -> Dict[str, Any]:
    """
    Threshold positive-class probabilities and score them.

    Parameters
    ----------
    model_name : str
        Name stored under "model" (a classifier or "ensemble").
    y_true : ArrayLike
        Holdout labels.
    probabilities : ArrayLike
        P(target == 1) for every holdout row.
    threshold : float
        A row is predicted positive iff its probability is strictly above it.

    Returns
    -------
    Dict[str, Any]
        "model", "threshold", "positive_rate" (share of rows predicted
        positive) followed by the keys of ``compute_classification_metrics``.
    """
    y_pred = apply_threshold(np.asarray(probabilities, dtype=np.float64), threshold)
    return {
        "model": model_name,
        "threshold": float(threshold),
        "positive_rate": float(y_pred.mean()) if y_pred.size else 0.0,
        **compute_classification_metrics(y_true, y_pred),
    }
