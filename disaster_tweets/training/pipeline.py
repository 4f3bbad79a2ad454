"""
End-to-end pipeline for disaster-tweet classification.

Steps:

- load the labeled train and unlabeled test partitions
- derive hand-crafted features per tweet (counts, ratios, sentiment tone)
- build one vocabulary from the normalized texts of both partitions
- encode both partitions against it and assemble the feature matrices
- split the training rows into fit / holdout parts (stratified)
- train logistic regression, naive Bayes and random forest on the fit part
  and score them on the holdout part
- combine logistic regression and random forest probabilities (2:1),
  tuning the decision threshold on the holdout part if configured
- refit on the full training partition and predict the test partition
- write one submission CSV (id, target) per model and for the ensemble,
  plus metrics, the vocabulary, fitted models and figures

This module is designed to be callable both as a library function and
as a standalone script (via `python -m disaster_tweets.training.pipeline`).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import joblib
import numpy as np
import pandas as pd
from sklearn.base import clone

from disaster_tweets.data.datasets import (
    DEFAULT_DATA_CONFIG_PATH,
    TweetPartition,
    load_data_config,
    load_partitions,
)
from disaster_tweets.data.split import holdout_indices
from disaster_tweets.evaluation import plots
from disaster_tweets.evaluation.metrics import holdout_report
from disaster_tweets.features.assembler import (
    AssembledMatrix,
    assemble_features,
    check_alignment,
)
from disaster_tweets.features.document_term import encode_partitions
from disaster_tweets.features.sentiment import SentimentScorer, scorer_from_config
from disaster_tweets.features.text_features import (
    DERIVED_FEATURE_COLUMNS,
    NORMALIZED_TEXT_COLUMN,
    add_derived_features,
)
from disaster_tweets.features.vocabulary import Vocabulary, build_vocabulary
from disaster_tweets.models.ensemble import (
    apply_threshold,
    ensemble_settings,
    tune_threshold,
    weighted_average,
)
from disaster_tweets.models.ml_models import (
    DEFAULT_ML_CONFIG_PATH,
    build_all_ml_models,
    load_ml_config,
    positive_class_proba,
)
from disaster_tweets.utils.training_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    PACKAGE_LOGGER_NAME,
    ensure_dir_exists,
    get_logger,
    load_train_config,
    seed_everything,
)


ENSEMBLE_NAME = "ensemble"

logger = logging.getLogger(__name__)


@dataclass
class FeatureSet:
    """
    Everything produced by the feature stages for both partitions.
    """

    train: TweetPartition
    test: TweetPartition
    vocabulary: Vocabulary
    X_train: AssembledMatrix
    X_test: AssembledMatrix


@dataclass
class PipelineResult:
    """
    Summary returned by ``run_pipeline``.

    Attributes
    ----------
    metrics : pd.DataFrame
        One row per model (and the ensemble) with holdout metrics.
    threshold : float
        Decision threshold used for the ensemble.
    submissions : Dict[str, str]
        Variant name -> path of the written submission CSV.
    vocabulary_size : int
        Number of retained vocabulary terms.
    n_features : int
        Width of the assembled feature matrices.
    """

    metrics: pd.DataFrame
    threshold: float
    submissions: Dict[str, str] = field(default_factory=dict)
    vocabulary_size: int = 0
    n_features: int = 0


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def build_feature_set(
    train: TweetPartition,
    test: TweetPartition,
    data_cfg: Dict[str, Any],
    scorer: SentimentScorer,
) -> FeatureSet:
    """
    Run the feature stages: derive, build vocabulary, encode, assemble.

    Raises
    ------
    VocabularyMismatchError
        If the assembled train and test matrices are not aligned.
    """
    preprocessing_cfg = data_cfg["preprocessing"]

    train = add_derived_features(train, preprocessing_cfg, scorer)
    test = add_derived_features(test, preprocessing_cfg, scorer)

    corpus = pd.concat(
        [train.frame[NORMALIZED_TEXT_COLUMN], test.frame[NORMALIZED_TEXT_COLUMN]],
        ignore_index=True,
    )
    vocabulary = build_vocabulary(corpus, preprocessing_cfg, data_cfg["vocabulary"])

    train_dtm, test_dtm = encode_partitions(
        train.frame[NORMALIZED_TEXT_COLUMN],
        test.frame[NORMALIZED_TEXT_COLUMN],
        vocabulary,
        preprocessing_cfg,
    )

    X_train = assemble_features(train, train_dtm, vocabulary)
    X_test = assemble_features(test, test_dtm, vocabulary)
    check_alignment(X_train, X_test)

    return FeatureSet(train=train, test=test, vocabulary=vocabulary, X_train=X_train, X_test=X_test)


def fit_and_predict(
    models: Dict[str, Any],
    X_fit: Any,
    y_fit: np.ndarray,
    X_eval: Any,
) -> Dict[str, np.ndarray]:
    """
    Fit every model and return its positive-class probabilities on ``X_eval``.
    """
    probabilities: Dict[str, np.ndarray] = {}
    for name, model in models.items():
        model.fit(X_fit, y_fit)
        probabilities[name] = positive_class_proba(model, X_eval)
    return probabilities


def write_submission(ids: np.ndarray, labels: np.ndarray, path: str) -> str:
    """
    Write a submission CSV with columns id, target.
    """
    submission = pd.DataFrame({"id": ids, "target": np.asarray(labels, dtype=np.int64)})
    submission.to_csv(path, index=False)
    return path


def _save_figures(
    features: FeatureSet,
    metrics_df: pd.DataFrame,
    ensemble_cm: List[List[int]],
    train_cfg: Dict[str, Any],
) -> None:
    figures_dir = train_cfg["paths"].get("figures_dir", "experiments/figures")
    ensure_dir_exists(figures_dir)
    plots_cfg = train_cfg.get("plots", {}) or {}

    plots.plot_target_distribution(
        features.train.labels,
        out_path=os.path.join(figures_dir, "target_distribution.png"),
        show=False,
    )
    plots.plot_feature_distributions(
        features.train.frame,
        DERIVED_FEATURE_COLUMNS,
        label_column=features.train.label_column,
        out_path=os.path.join(figures_dir, "feature_distributions.png"),
        show=False,
    )
    if len(features.vocabulary) > 0:
        plots.plot_top_terms(
            features.vocabulary,
            top_k=int(plots_cfg.get("top_terms", 20)),
            out_path=os.path.join(figures_dir, "top_terms.png"),
            show=False,
        )
    plots.plot_metric_bar(
        metrics_df,
        metric="accuracy",
        out_path=os.path.join(figures_dir, "holdout_accuracy.png"),
        show=False,
    )
    plots.plot_confusion_matrix(
        np.asarray(ensemble_cm),
        title="Ensemble confusion matrix (holdout)",
        out_path=os.path.join(figures_dir, "ensemble_confusion_matrix.png"),
        show=False,
    )
    logger.info("Saved figures to %s", figures_dir)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def run_pipeline_from_configs(
    data_cfg: Dict[str, Any],
    ml_cfg: Dict[str, Any],
    train_cfg: Dict[str, Any],
    scorer: Optional[SentimentScorer] = None,
) -> PipelineResult:
    """
    Run the full pipeline from already-loaded configuration dictionaries.

    Parameters
    ----------
    data_cfg, ml_cfg, train_cfg : Dict[str, Any]
        Contents of config/data.yaml, config/ml.yaml and config/train.yaml.
    scorer : Optional[SentimentScorer]
        Sentiment scorer for the tone/word_count features; the NLTK VADER
        scorer is built from the config if None.

    Returns
    -------
    PipelineResult
        Holdout metrics, chosen threshold and submission paths.
    """
    seed_everything(int(train_cfg.get("general", {}).get("random_state", 42)))
    get_logger(name=PACKAGE_LOGGER_NAME, config=train_cfg, log_file_suffix="pipeline")

    paths_cfg = train_cfg["paths"]
    results_dir = paths_cfg.get("results_dir", "experiments/results")
    models_dir = paths_cfg.get("models_dir", "experiments/models")
    submissions_dir = paths_cfg.get("submissions_dir", "experiments/submissions")
    for directory in (results_dir, submissions_dir):
        ensure_dir_exists(directory)

    # ------------------------------------------------------------------
    # Data and features
    # ------------------------------------------------------------------
    train, test = load_partitions(data_cfg)
    logger.info("Train size: %d, Test size: %d", len(train), len(test))

    if scorer is None:
        scorer = scorer_from_config(data_cfg["preprocessing"])

    logger.info("Deriving features and building the vocabulary...")
    features = build_feature_set(train, test, data_cfg, scorer)
    logger.info(
        "Feature shapes: X_train=%s, X_test=%s (vocabulary: %d terms)",
        features.X_train.shape,
        features.X_test.shape,
        len(features.vocabulary),
    )
    features.vocabulary.to_frame().to_csv(os.path.join(results_dir, "vocabulary.csv"), index=False)

    # ------------------------------------------------------------------
    # Holdout evaluation
    # ------------------------------------------------------------------
    y_train = features.train.labels
    fit_idx, holdout_idx = holdout_indices(y_train, data_cfg["split"])
    X_fit = features.X_train.rows(fit_idx).matrix
    X_hold = features.X_train.rows(holdout_idx).matrix
    y_fit, y_hold = y_train[fit_idx], y_train[holdout_idx]
    logger.info("Fit size: %d, Holdout size: %d", len(fit_idx), len(holdout_idx))

    models = build_all_ml_models(ml_cfg)
    settings = ensemble_settings(ml_cfg)
    unknown = [m for m in settings["members"] if m not in models]
    if unknown:
        raise ValueError(f"Unknown ensemble member(s): {unknown}. Available: {list(models)}")

    holdout_proba = fit_and_predict(models, X_fit, y_fit, X_hold)

    metrics_records = []
    for name, proba in holdout_proba.items():
        metrics = holdout_report(name, y_hold, proba, threshold=0.5)
        logger.info(
            "Holdout metrics for %s - acc: %.4f, prec: %.4f, rec: %.4f, f1: %.4f",
            name,
            metrics["accuracy"],
            metrics["precision"],
            metrics["recall"],
            metrics["f1"],
        )
        metrics_records.append(metrics)

    ensemble_hold = weighted_average(
        [holdout_proba[m] for m in settings["members"]], settings["weights"]
    )
    threshold = settings["threshold"]
    if settings["tune_threshold"]:
        threshold, tuned_acc = tune_threshold(ensemble_hold, y_hold, settings["grid"])
        logger.info("Tuned ensemble threshold: %.2f (holdout accuracy %.4f)", threshold, tuned_acc)

    ensemble_metrics = holdout_report(ENSEMBLE_NAME, y_hold, ensemble_hold, threshold=threshold)
    logger.info(
        "Holdout metrics for %s (%s, weights %s) - acc: %.4f, f1: %.4f",
        ENSEMBLE_NAME,
        "+".join(settings["members"]),
        settings["weights"],
        ensemble_metrics["accuracy"],
        ensemble_metrics["f1"],
    )
    metrics_records.append(ensemble_metrics)

    for record in metrics_records:
        metrics_json_path = os.path.join(results_dir, f"metrics_{record['model']}.json")
        with open(metrics_json_path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)

    metrics_df = pd.DataFrame(metrics_records)
    metrics_df.drop(columns=["confusion_matrix"]).to_csv(
        os.path.join(results_dir, "results.csv"), index=False
    )

    # ------------------------------------------------------------------
    # Final fit and test predictions
    # ------------------------------------------------------------------
    if bool(ml_cfg["general"].get("refit_on_full_train", True)):
        logger.info("Refitting all models on the full training partition...")
        final_models = {name: clone(model) for name, model in models.items()}
        test_proba = fit_and_predict(final_models, features.X_train.matrix, y_train, features.X_test.matrix)
    else:
        final_models = models
        test_proba = {
            name: positive_class_proba(model, features.X_test.matrix)
            for name, model in models.items()
        }

    submissions: Dict[str, str] = {}
    for name, proba in test_proba.items():
        path = os.path.join(submissions_dir, f"submission_{name}.csv")
        submissions[name] = write_submission(features.X_test.ids, apply_threshold(proba, 0.5), path)

    ensemble_test = weighted_average([test_proba[m] for m in settings["members"]], settings["weights"])
    submissions[ENSEMBLE_NAME] = write_submission(
        features.X_test.ids,
        apply_threshold(ensemble_test, threshold),
        os.path.join(submissions_dir, f"submission_{ENSEMBLE_NAME}.csv"),
    )
    logger.info("Wrote %d submission files to %s", len(submissions), submissions_dir)

    save_cfg = train_cfg.get("save", {}) or {}
    if bool(save_cfg.get("save_models", False)):
        ensure_dir_exists(models_dir)
        overwrite = bool(save_cfg.get("overwrite_existing", False))
        for name, model in final_models.items():
            model_path = os.path.join(models_dir, f"model_{name}.joblib")
            if not os.path.exists(model_path) or overwrite:
                joblib.dump(model, model_path)
                logger.info("Saved trained model '%s' to %s", name, model_path)
            else:
                logger.info(
                    "Model file already exists and overwrite_existing is False: %s",
                    model_path,
                )

    if bool((train_cfg.get("plots", {}) or {}).get("enabled", False)):
        _save_figures(features, metrics_df, ensemble_metrics["confusion_matrix"], train_cfg)

    return PipelineResult(
        metrics=metrics_df,
        threshold=float(threshold),
        submissions=submissions,
        vocabulary_size=len(features.vocabulary),
        n_features=features.X_train.shape[1],
    )


def run_pipeline(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    ml_config_path: str = DEFAULT_ML_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
    scorer: Optional[SentimentScorer] = None,
) -> PipelineResult:
    """
    Load the three YAML configs and run the full pipeline.
    """
    return run_pipeline_from_configs(
        data_cfg=load_data_config(data_config_path),
        ml_cfg=load_ml_config(ml_config_path),
        train_cfg=load_train_config(train_config_path),
        scorer=scorer,
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = run_pipeline()


if __name__ == "__main__":
    main()
