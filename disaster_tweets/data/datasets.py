"""
Dataset loading utilities for the disaster-tweet dataset.

This module is responsible for:
- reading the dataset configuration from config/data.yaml
- loading the train and test CSV files into pandas DataFrames
- validating the column contract (id, keyword, location, text[, target])
- rejecting malformed rows with a diagnostic naming the offending row ids
- wrapping each table in an immutable ``TweetPartition`` value object

Partitions are never mutated by later stages: feature derivation returns a
new partition with extra columns (see ``TweetPartition.with_frame``).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from disaster_tweets.errors import (
    EmptyTextError,
    MalformedInputFileError,
    MissingColumnError,
)
from disaster_tweets.utils.training_utils import load_yaml_config


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "split", "preprocessing" and
        "vocabulary" sections.
    """
    cfg = load_yaml_config(config_path, kind="Data config")

    for section in ("dataset", "split", "preprocessing", "vocabulary"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in data config: {config_path}')

    return cfg


# ---------------------------------------------------------------------------
# Partition value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TweetPartition:
    """
    One partition (train or test) of the tweet dataset.

    Attributes
    ----------
    name : str
        Partition name, "train" or "test".
    frame : pd.DataFrame
        Rows with columns id, keyword, location, text[, target] and, once
        decorated, the derived feature columns.
    has_labels : bool
        True if the ``target`` column is present.
    id_column, text_column, label_column : str
        Column names from the dataset configuration.
    """

    name: str
    frame: pd.DataFrame
    has_labels: bool
    id_column: str = "id"
    text_column: str = "text"
    label_column: str = "target"

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def ids(self) -> np.ndarray:
        return self.frame[self.id_column].to_numpy()

    @property
    def texts(self) -> pd.Series:
        return self.frame[self.text_column]

    @property
    def labels(self) -> np.ndarray:
        if not self.has_labels:
            raise MissingColumnError(
                f"Partition '{self.name}' has no '{self.label_column}' column."
            )
        return self.frame[self.label_column].to_numpy()

    def with_frame(self, frame: pd.DataFrame) -> "TweetPartition":
        """
        Return a copy of this partition holding ``frame`` instead.
        """
        return TweetPartition(
            name=self.name,
            frame=frame,
            has_labels=self.has_labels,
            id_column=self.id_column,
            text_column=self.text_column,
            label_column=self.label_column,
        )


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _read_csv(csv_path: str) -> pd.DataFrame:
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Dataset CSV not found at: {csv_path}")

    try:
        return pd.read_csv(csv_path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise MalformedInputFileError(f"Could not parse CSV file {csv_path}: {exc}") from exc


def _validate_ids(df: pd.DataFrame, id_column: str, csv_path: str) -> pd.Series:
    """
    Coerce the id column to integers, rejecting missing, non-integer or
    duplicated values.
    """
    numeric = pd.to_numeric(df[id_column], errors="coerce")
    bad_mask = ~np.isfinite(numeric) | (numeric != np.floor(numeric))
    if bad_mask.any():
        # No usable id for these rows, so report the CSV line numbers
        # (header is line 1).
        lines = [f"line {i + 2}" for i in np.flatnonzero(bad_mask.to_numpy())]
        raise MalformedInputFileError(
            f"Column '{id_column}' in {csv_path} must hold integer ids", row_ids=lines
        )

    ids = numeric.astype(np.int64)
    duplicated = ids[ids.duplicated(keep=False)].unique().tolist()
    if duplicated:
        raise MalformedInputFileError(
            f"Duplicated '{id_column}' values in {csv_path}", row_ids=duplicated
        )
    return ids


def _validate_labels(
    df: pd.DataFrame,
    label_column: str,
    id_column: str,
    csv_path: str,
) -> pd.Series:
    numeric = pd.to_numeric(df[label_column], errors="coerce")
    bad_mask = ~numeric.isin([0, 1])
    if bad_mask.any():
        raise MalformedInputFileError(
            f"Column '{label_column}' in {csv_path} must be 0 or 1",
            row_ids=df.loc[bad_mask, id_column].tolist(),
        )
    return numeric.astype(np.int64)


def find_empty_text_ids(partition: TweetPartition) -> List:
    """
    Return the ids of rows whose text is empty or whitespace-only.
    """
    mask = partition.texts.str.strip() == ""
    return partition.frame.loc[mask, partition.id_column].tolist()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_partition(
    csv_path: str,
    name: str,
    data_cfg: Dict[str, Any],
    has_labels: bool,
) -> TweetPartition:
    """
    Load one partition of the tweet dataset from CSV and validate it.

    Parameters
    ----------
    csv_path : str
        Path to the CSV file.
    name : str
        Partition name ("train" or "test").
    data_cfg : Dict[str, Any]
        Full data configuration (see config/data.yaml).
    has_labels : bool
        Whether the file must carry the label column.

    Returns
    -------
    TweetPartition
        Validated partition, rows in file order.

    Raises
    ------
    FileNotFoundError
        If the CSV file does not exist.
    MalformedInputFileError
        If the file cannot be parsed or contains invalid ids or labels.
    MissingColumnError
        If required columns are absent.
    EmptyTextError
        If empty texts are present and preprocessing.empty_text is "reject".
    """
    dataset_cfg = data_cfg["dataset"]
    id_column = dataset_cfg.get("id_column", "id")
    text_column = dataset_cfg.get("text_column", "text")
    label_column = dataset_cfg.get("label_column", "target")
    optional_columns = list(dataset_cfg.get("optional_text_columns", ["keyword", "location"]))

    df = _read_csv(csv_path)

    required = [id_column, *optional_columns, text_column]
    if has_labels:
        required.append(label_column)
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise MissingColumnError(
            f"Missing required column(s) in {csv_path}: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    df = df.copy()
    df[id_column] = _validate_ids(df, id_column, csv_path)
    if has_labels:
        df[label_column] = _validate_labels(df, label_column, id_column, csv_path)

    # Missing text is treated as empty text rather than dropped.
    for col in (*optional_columns, text_column):
        df[col] = df[col].fillna("").astype(str)

    df = df.reset_index(drop=True)

    partition = TweetPartition(
        name=name,
        frame=df,
        has_labels=has_labels,
        id_column=id_column,
        text_column=text_column,
        label_column=label_column,
    )

    empty_ids = find_empty_text_ids(partition)
    if empty_ids:
        policy = str(data_cfg["preprocessing"].get("empty_text", "allow")).lower()
        if policy == "reject":
            raise EmptyTextError(f"Empty text in {name} partition", row_ids=empty_ids)
        logger.warning(
            "%d row(s) with empty text in %s partition; their features will be zero: %s",
            len(empty_ids),
            name,
            empty_ids[:20],
        )

    logger.info("Loaded %s partition with %d rows from %s", name, len(df), csv_path)
    return partition


def load_partitions(data_cfg: Dict[str, Any]) -> Tuple[TweetPartition, TweetPartition]:
    """
    Load the labeled train partition and the unlabeled test partition.

    Returns
    -------
    Tuple[TweetPartition, TweetPartition]
        (train, test)
    """
    dataset_cfg = data_cfg["dataset"]
    train = load_partition(
        dataset_cfg.get("train_path", "data/raw/train.csv"),
        name="train",
        data_cfg=data_cfg,
        has_labels=True,
    )
    test = load_partition(
        dataset_cfg.get("test_path", "data/raw/test.csv"),
        name="test",
        data_cfg=data_cfg,
        has_labels=False,
    )
    return train, test
