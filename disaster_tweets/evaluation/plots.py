"""
Plotting utilities for the disaster-tweet report.

Exploratory plots:
- class balance of the training partition
- distributions of the derived features split by target
- most frequent vocabulary terms

Result plots:
- a chosen metric across models
- confusion matrix of one model

Every function returns ``(fig, ax)``, saves to ``out_path`` when given and
only calls ``plt.show()`` when ``show`` is True.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from disaster_tweets.features.vocabulary import Vocabulary


def _finish(fig, out_path: Optional[str], show: bool) -> None:
    fig.tight_layout()

    if out_path is not None:
        fig.savefig(out_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)


# ---------------------------------------------------------------------------
# Exploratory plots
# ---------------------------------------------------------------------------


def plot_target_distribution(
    labels: Sequence[int],
    class_names: Sequence[str] = ("not disaster", "disaster"),
    figsize: Tuple[float, float] = (6.0, 4.0),
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Bar chart of the number of training tweets per class.
    """
    counts = pd.Series(np.asarray(labels)).value_counts().reindex([0, 1], fill_value=0)

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(list(class_names), counts.to_numpy())
    ax.set_ylabel("Tweets")
    ax.set_title("Target distribution")
    for i, v in enumerate(counts.to_numpy()):
        ax.text(i, v, str(int(v)), ha="center", va="bottom", fontsize=9)

    _finish(fig, out_path, show)
    return fig, ax


def plot_feature_distributions(
    frame: pd.DataFrame,
    feature_columns: Sequence[str],
    label_column: str = "target",
    bins: int = 30,
    n_cols: int = 3,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Overlaid histograms of each derived feature for target 0 vs 1.

    Raises
    ------
    ValueError
        If a requested column is missing from ``frame``.
    """
    missing = [c for c in (*feature_columns, label_column) if c not in frame.columns]
    if missing:
        raise ValueError(f"Columns not found in frame: {missing}")

    n_rows = int(np.ceil(len(feature_columns) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(4.0 * n_cols, 3.0 * n_rows), squeeze=False)

    for ax, column in zip(axes.flat, feature_columns):
        for target, group in frame.groupby(label_column):
            ax.hist(group[column], bins=bins, alpha=0.5, density=True, label=f"target={target}")
        ax.set_title(column)
        ax.legend(fontsize=7)

    for ax in list(axes.flat)[len(feature_columns):]:
        ax.set_visible(False)

    _finish(fig, out_path, show)
    return fig, axes


def plot_top_terms(
    vocabulary: Vocabulary,
    top_k: int = 20,
    figsize: Tuple[float, float] = (8.0, 6.0),
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Horizontal bar chart of the most frequent retained terms.
    """
    df = vocabulary.to_frame().sort_values(["count", "term"], ascending=[False, True]).head(top_k)

    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(df["term"][::-1], df["count"][::-1])
    ax.set_xlabel("Occurrences")
    ax.set_title(f"Top {len(df)} vocabulary terms")

    _finish(fig, out_path, show)
    return fig, ax


# ---------------------------------------------------------------------------
# Result plots
# ---------------------------------------------------------------------------


def plot_metric_bar(
    results_df: pd.DataFrame,
    metric: str = "f1",
    figsize: Tuple[float, float] = (8.0, 5.0),
    rotate_xticks: int = 30,
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a bar chart of a chosen metric (e.g., F1) across models.

    Parameters
    ----------
    results_df : pd.DataFrame
        DataFrame with a "model" column and one column per metric.
    metric : str
        Metric column to plot (default: "f1").
    """
    if results_df.empty:
        raise ValueError("results_df is empty; nothing to plot.")
    if metric not in results_df.columns:
        raise ValueError(
            f"Metric '{metric}' not found in DataFrame columns. "
            f"Available columns: {list(results_df.columns)}"
        )

    df_sorted = results_df.sort_values(metric, ascending=False, na_position="last")
    scores = pd.to_numeric(df_sorted[metric], errors="coerce")
    models = df_sorted["model"].astype(str).tolist()
    positions = np.arange(len(models))

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(positions, scores)
    ax.set_xticks(positions)
    ax.set_xticklabels(models, rotation=rotate_xticks, ha="right")
    ax.set_ylabel(metric.upper())
    ax.set_xlabel("Model")
    ax.set_title(title or f"Model comparison by {metric.upper()}")
    ax.set_ylim(0.0, 1.05)

    for i, v in enumerate(scores):
        if np.isnan(v):
            continue
        ax.text(i, v, f"{v:.3f}", ha="center", va="bottom", fontsize=9)

    _finish(fig, out_path, show)
    return fig, ax


def plot_confusion_matrix(
    cm: np.ndarray,
    labels: Sequence[str] = ("not disaster", "disaster"),
    normalize: bool = False,
    figsize: Tuple[float, float] = (6.0, 5.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a confusion matrix as a heatmap.

    Rows correspond to true labels and columns to predicted labels. With
    ``normalize`` each row is scaled to sum to 1.0.
    """
    cm = np.asarray(cm)
    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValueError("Confusion matrix must be a square 2D array.")

    n_classes = cm.shape[0]
    if len(labels) != n_classes:
        raise ValueError(
            f"Number of labels ({len(labels)}) does not match CM size ({n_classes})."
        )

    if normalize:
        row_sums = cm.sum(axis=1, keepdims=True)
        cm_display = np.divide(
            cm, row_sums, out=np.zeros(cm.shape, dtype=float), where=row_sums != 0
        )
        fmt = ".2f"
    else:
        cm_display = cm
        fmt = "d"

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(cm_display, interpolation="nearest", cmap="Blues")
    fig.colorbar(im, ax=ax)

    ax.set(
        xticks=np.arange(n_classes),
        yticks=np.arange(n_classes),
        xticklabels=labels,
        yticklabels=labels,
        ylabel="True label",
        xlabel="Predicted label",
    )
    ax.set_title(title or ("Normalized confusion matrix" if normalize else "Confusion matrix"))
    plt.setp(ax.get_xticklabels(), rotation=45, ha="right", rotation_mode="anchor")

    thresh = cm_display.max() / 2.0 if cm_display.size > 0 else 0.5
    for i in range(n_classes):
        for j in range(n_classes):
            value = cm_display[i, j]
            ax.text(
                j,
                i,
                format(value, fmt),
                ha="center",
                va="center",
                color="white" if value > thresh else "black",
            )

    _finish(fig, out_path, show)
    return fig, ax
