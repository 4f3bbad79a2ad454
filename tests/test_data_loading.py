"""
Tests for data loading utilities.

These tests validate that:

- the data configuration can be loaded and contains the core sections
- a well-formed partition loads with the expected column contract
- malformed files and rows are rejected with a diagnostic naming the rows
- the holdout split is stratified and deterministic
"""

from __future__ import annotations

import dataclasses

import numpy as np
import pandas as pd
import pytest

from disaster_tweets.data.datasets import (
    TweetPartition,
    find_empty_text_ids,
    load_data_config,
    load_partition,
    load_partitions,
)
from disaster_tweets.data.split import holdout_indices
from disaster_tweets.errors import (
    EmptyTextError,
    MalformedInputFileError,
    MissingColumnError,
    TweetPipelineError,
)

from conftest import CONFIG_DIR, make_tweets


def _write(tmp_path, frame, name="train.csv"):
    path = tmp_path / name
    frame.to_csv(path, index=False)
    return str(path)


def test_load_data_config_has_required_keys():
    cfg = load_data_config(str(CONFIG_DIR / "data.yaml"))

    for section in ("dataset", "split", "preprocessing", "vocabulary"):
        assert section in cfg

    assert cfg["vocabulary"]["min_term_count"] == 10
    assert cfg["vocabulary"]["max_doc_prop"] == 0.5
    assert cfg["vocabulary"]["min_doc_prop"] == 0.001


def test_load_data_config_missing_section(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("dataset: {}\nsplit: {}\n", encoding="utf-8")

    with pytest.raises(KeyError):
        load_data_config(str(path))


def test_load_partitions(tweet_csvs):
    _, _, data_cfg = tweet_csvs
    train, test = load_partitions(data_cfg)

    assert isinstance(train, TweetPartition)
    assert train.has_labels and not test.has_labels
    assert len(train) == 120 and len(test) == 40
    assert set(train.labels) == {0, 1}
    assert train.frame["id"].dtype == np.int64
    # Empty keyword/location cells are read back as "" rather than NaN.
    assert (train.frame["location"] == "").all()
    assert test.ids[0] == 1000


def test_unlabeled_partition_has_no_labels(tweet_csvs):
    _, _, data_cfg = tweet_csvs
    _, test = load_partitions(data_cfg)

    with pytest.raises(MissingColumnError):
        _ = test.labels


def test_partition_is_immutable(tweet_csvs):
    _, _, data_cfg = tweet_csvs
    train, _ = load_partitions(data_cfg)

    with pytest.raises(dataclasses.FrozenInstanceError):
        train.name = "other"


def test_missing_file(tmp_path, data_cfg):
    with pytest.raises(FileNotFoundError):
        load_partition(str(tmp_path / "nope.csv"), "train", data_cfg, has_labels=True)


def test_missing_column(tmp_path, data_cfg):
    path = _write(tmp_path, make_tweets(4).drop(columns=["location"]))

    with pytest.raises(MissingColumnError, match="location"):
        load_partition(path, "train", data_cfg, has_labels=True)


def test_missing_target_column_in_train(tmp_path, data_cfg):
    path = _write(tmp_path, make_tweets(4, with_target=False))

    with pytest.raises(MissingColumnError, match="target"):
        load_partition(path, "train", data_cfg, has_labels=True)


def test_invalid_target_names_row_ids(tmp_path, data_cfg):
    frame = make_tweets(5)
    frame.loc[1, "target"] = 2
    frame.loc[3, "target"] = None
    path = _write(tmp_path, frame)

    with pytest.raises(MalformedInputFileError) as excinfo:
        load_partition(path, "train", data_cfg, has_labels=True)

    assert excinfo.value.row_ids == [2, 4]
    assert isinstance(excinfo.value, TweetPipelineError)
    assert isinstance(excinfo.value, ValueError)


def test_duplicate_ids(tmp_path, data_cfg):
    frame = make_tweets(4)
    frame.loc[2, "id"] = 1
    path = _write(tmp_path, frame)

    with pytest.raises(MalformedInputFileError) as excinfo:
        load_partition(path, "train", data_cfg, has_labels=True)
    assert excinfo.value.row_ids == [1]


def test_non_integer_ids(tmp_path, data_cfg):
    frame = make_tweets(3)
    frame["id"] = frame["id"].astype(object)
    frame.loc[1, "id"] = "abc"
    path = _write(tmp_path, frame)

    with pytest.raises(MalformedInputFileError) as excinfo:
        load_partition(path, "train", data_cfg, has_labels=True)
    assert excinfo.value.row_ids == ["line 3"]


def test_infinite_id_is_rejected(tmp_path, data_cfg):
    frame = make_tweets(3)
    frame["id"] = frame["id"].astype(object)
    frame.loc[0, "id"] = "inf"
    path = _write(tmp_path, frame)

    with pytest.raises(MalformedInputFileError) as excinfo:
        load_partition(path, "train", data_cfg, has_labels=True)
    assert excinfo.value.row_ids == ["line 2"]


def test_empty_file(tmp_path, data_cfg):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(MalformedInputFileError):
        load_partition(str(path), "test", data_cfg, has_labels=False)


def test_unparsable_file(tmp_path, data_cfg):
    path = tmp_path / "broken.csv"
    path.write_text(
        "id,keyword,location,text\n1,,,hello\n2,,,too,many,fields,here\n",
        encoding="utf-8",
    )

    with pytest.raises(MalformedInputFileError):
        load_partition(str(path), "test", data_cfg, has_labels=False)


def test_empty_text_allowed_by_default(tmp_path, data_cfg):
    frame = make_tweets(3, with_target=False)
    frame.loc[1, "text"] = None
    path = _write(tmp_path, frame, "test.csv")

    partition = load_partition(path, "test", data_cfg, has_labels=False)

    assert partition.texts.iloc[1] == ""
    assert find_empty_text_ids(partition) == [2]


def test_empty_text_rejected_by_policy(tmp_path, data_cfg):
    data_cfg["preprocessing"]["empty_text"] = "reject"
    frame = make_tweets(3, with_target=False)
    frame.loc[0, "text"] = "   "
    path = _write(tmp_path, frame, "test.csv")

    with pytest.raises(EmptyTextError) as excinfo:
        load_partition(path, "test", data_cfg, has_labels=False)
    assert excinfo.value.row_ids == [1]


def test_holdout_split_is_stratified_and_deterministic(data_cfg):
    labels = np.array([0] * 60 + [1] * 40)

    fit_a, hold_a = holdout_indices(labels, data_cfg["split"])
    fit_b, hold_b = holdout_indices(labels, data_cfg["split"])

    np.testing.assert_array_equal(hold_a, hold_b)
    assert len(hold_a) == 20 and len(fit_a) == 80
    assert set(fit_a).isdisjoint(hold_a)
    assert labels[hold_a].sum() == 8


def test_holdout_split_rejects_single_class(data_cfg):
    with pytest.raises(ValueError):
        holdout_indices(np.ones(10, dtype=int), data_cfg["split"])
