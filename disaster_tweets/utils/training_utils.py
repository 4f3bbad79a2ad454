"""
Training and utility helpers.

This module centralizes common functionality used across the project:

- loading the global training configuration (config/train.yaml)
- ensuring directories exist before writing files
- setting random seeds for reproducibility
- constructing loggers that respect config/logging settings

The pipeline and the command-line runner rely on these utilities.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Any, Dict, Optional

import numpy as np
import yaml


DEFAULT_TRAIN_CONFIG_PATH = "config/train.yaml"

# Parent of every module logger in the package (logging.getLogger(__name__)).
PACKAGE_LOGGER_NAME = "disaster_tweets"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_yaml_config(path: str, kind: str = "Config") -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.
    kind : str
        Label used in error messages (e.g. "Train config").

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"{kind} file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None or not isinstance(cfg, dict):
        raise ValueError(f"{kind} file is empty or invalid: {path}")

    return cfg


def load_train_config(
    config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load and return the global training configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the train YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with sections such as "general", "paths",
        "logging", "plots", and "save".
    """
    # We keep this permissive: downstream code will access the keys it needs.
    return load_yaml_config(config_path, kind="Train config")


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    """
    Ensure that a directory exists (create it if necessary).
    """
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


# ---------------------------------------------------------------------------
# Reproducibility utilities
# ---------------------------------------------------------------------------


def seed_everything(seed: int = 42) -> None:
    """
    Seed Python and NumPy RNGs for reproducible experiments.

    Estimators additionally receive an explicit ``random_state`` from
    config/ml.yaml.
    """
    random.seed(seed)
    np.random.seed(seed)


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


def _parse_log_level(level_str: str) -> int:
    """
    Convert a string log level into a logging module constant.

    Parameters
    ----------
    level_str : str
        One of: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL" (case-insensitive).

    Returns
    -------
    int
        Corresponding logging level.
    """
    level_str = (level_str or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level_str, logging.INFO)


def get_logger(
    name: str,
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Construct and return a logger that respects the logging section of
    the global training config.

    Parameters
    ----------
    name : str
        Logger name. Configuring PACKAGE_LOGGER_NAME also captures the
        records of every module logger below it.
    config : Dict[str, Any]
        Global training configuration.
    log_file_suffix : Optional[str]
        Optional suffix appended to the log file name (e.g., "pipeline").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # Replace handlers from an earlier run so records never go to a stale file.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logging_cfg = config.get("logging", {}) or {}
    paths_cfg = config.get("paths", {}) or {}

    level = _parse_log_level(logging_cfg.get("level", "INFO"))
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Optional file handler
    if bool(logging_cfg.get("to_file", True)):
        logs_dir = paths_cfg.get("logs_dir", "experiments/logs")
        ensure_dir_exists(logs_dir)

        file_prefix = logging_cfg.get("file_prefix", "pipeline_log")
        if log_file_suffix:
            filename = f"{file_prefix}_{log_file_suffix}.log"
        else:
            filename = f"{file_prefix}.log"

        file_handler = logging.FileHandler(
            os.path.join(logs_dir, filename), encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
