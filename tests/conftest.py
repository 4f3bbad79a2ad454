"""
Shared fixtures for the test suite.

Configs are loaded from the repository's config/ directory and then
adjusted in memory, so tests never depend on the working directory.
A deterministic stub sentiment scorer replaces NLTK VADER wherever the
exact tone value does not matter, which keeps the suite free of NLTK
downloads.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Dict, List, Tuple

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from disaster_tweets.data.datasets import load_data_config
from disaster_tweets.models.ml_models import load_ml_config
from disaster_tweets.utils.training_utils import load_train_config


REPO_ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = REPO_ROOT / "config"


class StubScorer:
    """
    tone = (#"good" - #"bad") / #words, word_count = whitespace tokens.
    """

    def score(self, text: str) -> Tuple[float, int]:
        words = text.lower().split()
        if not words:
            return 0.0, 0
        tone = (words.count("good") - words.count("bad")) / len(words)
        return tone, len(words)


_DISASTER_WORDS = ["fire", "flood", "earthquake", "evacuation", "storm", "wildfire"]
_CALM_WORDS = ["beach", "coffee", "movie", "music", "birthday", "weekend"]
_SHARED_WORDS = ["today", "people", "city"]


def make_tweets(n: int, start_id: int = 1, with_target: bool = True) -> pd.DataFrame:
    """
    Build a small, easily separable tweet table.

    Even positions are disasters (URL + hashtag), odd positions are not
    (handle + exclamation).
    """
    rows: List[Dict] = []
    for i in range(n):
        shared = _SHARED_WORDS[i % len(_SHARED_WORDS)]
        if i % 2 == 0:
            w1 = _DISASTER_WORDS[(i // 2) % 6]
            w2 = _DISASTER_WORDS[(i // 2 + 1) % 6]
            text = f"{w1.upper()} {w2} near the {shared} bad http://t.co/{i} #{w1}"
            target = 1
        else:
            w1 = _CALM_WORDS[(i // 2) % 6]
            w2 = _CALM_WORDS[(i // 2 + 1) % 6]
            text = f"Good {w1} and {w2} with @friend in the {shared}!"
            target = 0
        row = {
            "id": start_id + i,
            "keyword": w1 if i % 3 else "",
            "location": "",
            "text": text,
        }
        if with_target:
            row["target"] = target
        rows.append(row)
    return pd.DataFrame(rows)


@pytest.fixture
def stub_scorer() -> StubScorer:
    return StubScorer()


@pytest.fixture
def data_cfg() -> Dict:
    return copy.deepcopy(load_data_config(str(CONFIG_DIR / "data.yaml")))


@pytest.fixture
def preprocessing_cfg(data_cfg) -> Dict:
    return data_cfg["preprocessing"]


@pytest.fixture
def ml_cfg() -> Dict:
    cfg = copy.deepcopy(load_ml_config(str(CONFIG_DIR / "ml.yaml")))
    cfg["ml_models"]["random_forest"]["n_estimators"] = 25
    cfg["ml_models"]["random_forest"]["n_jobs"] = 1
    return cfg


@pytest.fixture
def train_cfg(tmp_path) -> Dict:
    cfg = copy.deepcopy(load_train_config(str(CONFIG_DIR / "train.yaml")))
    out = tmp_path / "experiments"
    cfg["paths"] = {
        "results_dir": str(out / "results"),
        "models_dir": str(out / "models"),
        "submissions_dir": str(out / "submissions"),
        "figures_dir": str(out / "figures"),
        "logs_dir": str(out / "logs"),
    }
    cfg["logging"]["to_file"] = False
    return cfg


@pytest.fixture
def tweet_csvs(tmp_path, data_cfg) -> Tuple[Path, Path, Dict]:
    """
    Write synthetic train/test CSVs and point the data config at them.
    """
    train_path = tmp_path / "train.csv"
    test_path = tmp_path / "test.csv"
    make_tweets(120).to_csv(train_path, index=False)
    make_tweets(40, start_id=1000, with_target=False).to_csv(test_path, index=False)

    data_cfg["dataset"]["train_path"] = str(train_path)
    data_cfg["dataset"]["test_path"] = str(test_path)
    return train_path, test_path, data_cfg
