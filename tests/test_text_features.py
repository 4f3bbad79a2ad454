"""
Tests for the hand-crafted per-tweet features.

These tests validate that:

- the count features, the URL rewrite and the capital proportion follow
  their definitions, including the empty-text case
- frame- and partition-level helpers keep column order and row alignment
- the VADER scorer averages sentence polarities (with a fake analyzer)
  and gives tone a meaningful sign (skipped when the NLTK resources are
  not installed)
"""

from __future__ import annotations

import re

import pandas as pd
import pytest

from disaster_tweets.data.datasets import TweetPartition
from disaster_tweets.features import sentiment
from disaster_tweets.features.sentiment import VaderSentimentScorer
from disaster_tweets.features.text_features import (
    DERIVED_FEATURE_COLUMNS,
    NORMALIZED_TEXT_COLUMN,
    add_derived_features,
    derive_feature_frame,
    derive_text_features,
)


def test_breaking_news_example(preprocessing_cfg, stub_scorer):
    text = "BREAKING: wildfire spreads near http://x.co #fire @news"
    feats = derive_text_features(text, preprocessing_cfg, stub_scorer)

    assert feats["url_count"] == 1
    assert feats["hashtag_count"] == 1
    assert feats["handles_count"] == 1

    placeholder = preprocessing_cfg["url_placeholder"]
    assert placeholder in feats[NORMALIZED_TEXT_COLUMN]
    assert "http://x.co" not in feats[NORMALIZED_TEXT_COLUMN]
    assert feats[NORMALIZED_TEXT_COLUMN].startswith("BREAKING: wildfire spreads near ")


def test_counts_use_raw_text(preprocessing_cfg, stub_scorer):
    text = 'Hi! "Ok", it\'s 2 - 3 A.M.? https://t.co/AB9'
    feats = derive_text_features(text, preprocessing_cfg, stub_scorer)

    assert feats["char_count"] == len(text)
    # ! " " , ' - . . ? plus "." in the URL
    assert feats["punct_count"] == 10
    # H O A M in the text, A B in the URL
    assert feats["capital_count"] == 6
    assert feats["number_count"] == 3
    assert feats["url_count"] == 1


def test_multiple_urls_are_all_replaced(preprocessing_cfg, stub_scorer):
    text = "see http://a.com and https://b.org/x?y=1 now"
    feats = derive_text_features(text, preprocessing_cfg, stub_scorer)

    assert feats["url_count"] == 2
    assert feats[NORMALIZED_TEXT_COLUMN] == "see urlplaceholder and urlplaceholder now"


@pytest.mark.parametrize(
    "text",
    ["", "ABC", "abc 123", "http://X.CO", "Mixed Case Words!!", "    "],
)
def test_capital_prop_bounds(preprocessing_cfg, stub_scorer, text):
    feats = derive_text_features(text, preprocessing_cfg, stub_scorer)

    assert feats["capital_count"] <= feats["char_count"]
    assert 0.0 <= feats["capital_prop"] <= 1.0


def test_empty_text_yields_zero_features(preprocessing_cfg, stub_scorer):
    feats = derive_text_features("", preprocessing_cfg, stub_scorer)

    for column in DERIVED_FEATURE_COLUMNS:
        assert feats[column] == 0, column
    assert feats["capital_prop"] == 0.0
    assert feats[NORMALIZED_TEXT_COLUMN] == ""


def test_tone_and_word_count_come_from_scorer(preprocessing_cfg, stub_scorer):
    feats = derive_text_features("good good bad day http://t.co/x", preprocessing_cfg, stub_scorer)

    # The scorer sees the normalized text: 5 words, including the placeholder.
    assert feats["word_count"] == 5
    assert feats["tone"] == pytest.approx(1 / 5)


def test_derive_feature_frame_keeps_order_and_index(preprocessing_cfg, stub_scorer):
    texts = pd.Series(["a #b", "", "C @d http://e.f"], index=[10, 11, 12])
    frame = derive_feature_frame(texts, preprocessing_cfg, stub_scorer)

    assert list(frame.columns) == [NORMALIZED_TEXT_COLUMN, *DERIVED_FEATURE_COLUMNS]
    assert list(frame.index) == [10, 11, 12]
    assert frame.loc[10, "hashtag_count"] == 1
    assert frame.loc[12, "url_count"] == 1


def test_add_derived_features_returns_new_partition(preprocessing_cfg, stub_scorer):
    frame = pd.DataFrame(
        {"id": [1, 2], "keyword": ["", ""], "location": ["", ""], "text": ["Fire!", "calm"]}
    )
    partition = TweetPartition(name="test", frame=frame, has_labels=False)

    decorated = add_derived_features(partition, preprocessing_cfg, stub_scorer)

    assert decorated is not partition
    assert "char_count" not in partition.frame.columns
    assert list(decorated.frame["char_count"]) == [5, 4]
    assert list(decorated.frame["text"]) == ["Fire!", "calm"]

    # Decorating twice does not duplicate columns.
    again = add_derived_features(decorated, preprocessing_cfg, stub_scorer)
    assert list(again.frame.columns) == list(decorated.frame.columns)


@pytest.fixture(scope="module")
def vader_scorer():
    try:
        return VaderSentimentScorer(download_missing=False)
    except LookupError:
        pytest.skip("NLTK punkt_tab / vader_lexicon resources are not installed.")


def test_vader_tone_sign(vader_scorer):
    negative, n_neg = vader_scorer.score("This is a terrible, horrible disaster. People died.")
    positive, n_pos = vader_scorer.score("What a wonderful, lovely day. I love it.")

    assert negative < 0
    assert positive > 0
    assert n_neg > 0 and n_pos > 0


def test_vader_empty_text(vader_scorer):
    assert vader_scorer.score("") == (0.0, 0)
    assert vader_scorer.score("   ") == (0.0, 0)


def test_ascii_digits_only(preprocessing_cfg, stub_scorer):
    # Arabic-Indic three is a Unicode digit but not a decimal ASCII digit.
    feats = derive_text_features("Magnitude 7 quake, ٣ aftershocks", preprocessing_cfg, stub_scorer)
    assert feats["number_count"] == 1


class _FixedPolarityAnalyzer:
    def __init__(self, compounds):
        self.compounds = compounds
        self.seen = []

    def polarity_scores(self, sentence):
        self.seen.append(sentence)
        return {"compound": self.compounds[sentence]}


def test_vader_scorer_averages_sentence_polarity(monkeypatch):
    analyzer = _FixedPolarityAnalyzer(
        {"Fire downtown.": -0.6, "Stay safe everyone!": 0.4}
    )
    requested = []

    monkeypatch.setattr(
        sentiment, "ensure_nltk_resources", lambda names, download=True: requested.append(list(names))
    )
    monkeypatch.setattr(sentiment, "SentimentIntensityAnalyzer", lambda: analyzer)
    monkeypatch.setattr(
        sentiment,
        "sent_tokenize",
        lambda text, language="english": re.split(r"(?<=[.!?])\s+", text.strip()),
    )

    scorer = VaderSentimentScorer()
    tone, word_count = scorer.score("Fire downtown. Stay safe everyone!")

    assert requested == [["punkt_tab", "vader_lexicon"]]
    assert analyzer.seen == ["Fire downtown.", "Stay safe everyone!"]
    assert tone == pytest.approx(-0.1)
    assert word_count == 5
