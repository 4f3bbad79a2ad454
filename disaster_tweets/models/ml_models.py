"""
Classical machine learning model builders for disaster-tweet detection.

This module provides helper functions to construct the three classifiers
used by the pipeline:

- Logistic Regression (LR), L2-regularized
- Naive Bayes (NB), Gaussian or Bernoulli
- Random Forest (RF)

Hyperparameters are read from config/ml.yaml so they can be tuned without
modifying code. Every builder returns an object with ``fit(X, y)`` and
``predict_proba(X)``, so any estimator honouring that protocol can be
swapped in without touching the pipeline.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol

import numpy as np
import scipy.sparse as sp
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import BernoulliNB, GaussianNB
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import FunctionTransformer, StandardScaler

from disaster_tweets.utils.training_utils import load_yaml_config


DEFAULT_ML_CONFIG_PATH = "config/ml.yaml"

MODEL_NAMES = ("logistic_regression", "naive_bayes", "random_forest")


class ProbabilisticClassifier(Protocol):
    def fit(self, X: Any, y: Any) -> Any:
        ...

    def predict_proba(self, X: Any) -> np.ndarray:
        ...


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_ml_config(config_path: str = DEFAULT_ML_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the ML configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the ML YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with "general", "ml_models" and "ensemble"
        sections.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    KeyError
        If required sections are missing.
    """
    cfg = load_yaml_config(config_path, kind="ML config")

    for section in ("general", "ml_models", "ensemble"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in ML config: {config_path}')

    return cfg


# ---------------------------------------------------------------------------
# Model builder helpers
# ---------------------------------------------------------------------------


def _class_weight_or_none(use_balanced: bool) -> Any:
    return "balanced" if use_balanced else None


def to_dense(X: Any) -> np.ndarray:
    """
    Convert a (possibly sparse) matrix to a dense ndarray.

    Module-level so pipelines using it stay picklable.
    """
    if sp.issparse(X):
        return X.toarray()
    return np.asarray(X)


def build_logistic_regression(cfg: Dict[str, Any], use_balanced: bool) -> Any:
    """
    Build the regularized logistic regression.

    Derived count features and bag-of-words counts live on different
    scales, so the model is wrapped with a sparse-safe StandardScaler when
    general.use_feature_scaling is true.
    """
    mcfg = cfg["ml_models"]["logistic_regression"]
    model = LogisticRegression(
        C=float(mcfg.get("C", 1.0)),
        solver=str(mcfg.get("solver", "lbfgs")),
        max_iter=int(mcfg.get("max_iter", 1000)),
        fit_intercept=bool(mcfg.get("fit_intercept", True)),
        random_state=int(cfg["general"].get("random_state", 42)),
        class_weight=_class_weight_or_none(use_balanced),
    )

    if not bool(cfg["general"].get("use_feature_scaling", True)):
        return model

    return Pipeline(
        [
            ("scaler", StandardScaler(with_mean=False)),
            ("clf", model),
        ]
    )


def build_naive_bayes(cfg: Dict[str, Any]) -> Any:
    """
    Build a Naive Bayes classifier instance.

    Depending on config.ml_models.naive_bayes.type, we return either a
    GaussianNB (behind a densifying step, since it does not accept sparse
    input) or a BernoulliNB. Multinomial NB is not offered because the
    tone feature can be negative.
    """
    mcfg = cfg["ml_models"]["naive_bayes"]
    nb_type = str(mcfg.get("type", "gaussian")).lower()

    if nb_type == "gaussian":
        return Pipeline(
            [
                ("dense", FunctionTransformer(to_dense, accept_sparse=True)),
                ("clf", GaussianNB(var_smoothing=float(mcfg.get("var_smoothing", 1e-9)))),
            ]
        )
    if nb_type == "bernoulli":
        return BernoulliNB(
            alpha=float(mcfg.get("alpha", 1.0)),
            fit_prior=bool(mcfg.get("fit_prior", True)),
        )
    raise ValueError(f"Unknown naive_bayes type: {nb_type!r} (expected 'gaussian' or 'bernoulli')")


def build_random_forest(cfg: Dict[str, Any], use_balanced: bool) -> RandomForestClassifier:
    mcfg = cfg["ml_models"]["random_forest"]
    return RandomForestClassifier(
        n_estimators=int(mcfg.get("n_estimators", 300)),
        criterion=str(mcfg.get("criterion", "gini")),
        max_depth=mcfg.get("max_depth", None),
        min_samples_split=int(mcfg.get("min_samples_split", 2)),
        min_samples_leaf=int(mcfg.get("min_samples_leaf", 1)),
        max_features=mcfg.get("max_features", "sqrt"),
        n_jobs=int(mcfg.get("n_jobs", -1)),
        random_state=int(cfg["general"].get("random_state", 42)),
        class_weight=_class_weight_or_none(use_balanced),
    )


# ---------------------------------------------------------------------------
# Public factory and prediction helper
# ---------------------------------------------------------------------------


def build_all_ml_models(cfg: Dict[str, Any]) -> Dict[str, ProbabilisticClassifier]:
    """
    Build all configured ML models and return them in a dictionary.

    Parameters
    ----------
    cfg : Dict[str, Any]
        Full ML configuration (see ``load_ml_config``).

    Returns
    -------
    Dict[str, ProbabilisticClassifier]
        Unfitted estimators keyed by "logistic_regression", "naive_bayes"
        and "random_forest".
    """
    use_balanced = bool(cfg["general"].get("use_class_weight_balanced", False))

    return {
        "logistic_regression": build_logistic_regression(cfg, use_balanced),
        "naive_bayes": build_naive_bayes(cfg),
        "random_forest": build_random_forest(cfg, use_balanced),
    }


def positive_class_proba(model: ProbabilisticClassifier, X: Any) -> np.ndarray:
    """
    Return P(target == 1) for every row of ``X``.

    Raises
    ------
    ValueError
        If the model was not fitted on a label set containing class 1.
    """
    proba = np.asarray(model.predict_proba(X))
    classes = list(getattr(model, "classes_", [0, 1]))
    if 1 not in classes:
        raise ValueError(f"Model was not trained with a positive class; classes={classes}")
    return proba[:, classes.index(1)]
