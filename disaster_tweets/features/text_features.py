"""
Hand-crafted per-tweet features.

For each tweet we derive, independently of every other row:

- url_count      number of http(s) URLs
- punct_count    characters from the configured punctuation set
- handles_count  "@" characters
- hashtag_count  "#" characters
- char_count     total length of the raw text
- capital_count  uppercase ASCII letters
- capital_prop   capital_count / char_count (0.0 for empty text)
- number_count   ASCII digits 0-9
- tone           sentence-averaged sentiment polarity
- word_count     word tokens seen by the sentiment scorer

Character counts are taken on the raw text. Every URL is then replaced by a
placeholder token; the rewritten text (``text_normalized``) feeds the
sentiment scorer and the vocabulary.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Pattern, Tuple

import pandas as pd

from disaster_tweets.data.datasets import TweetPartition
from disaster_tweets.features.sentiment import SentimentScorer


DERIVED_FEATURE_COLUMNS: Tuple[str, ...] = (
    "url_count",
    "punct_count",
    "handles_count",
    "hashtag_count",
    "char_count",
    "capital_count",
    "capital_prop",
    "number_count",
    "tone",
    "word_count",
)
NORMALIZED_TEXT_COLUMN = "text_normalized"

DEFAULT_URL_PATTERN = r"https?://\S+"
DEFAULT_URL_PLACEHOLDER = "urlplaceholder"
DEFAULT_PUNCTUATION = ".!?,\"'-"

_CAPITAL_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")


def compile_url_pattern(preprocessing_cfg: Dict[str, Any]) -> Pattern[str]:
    return re.compile(preprocessing_cfg.get("url_pattern", DEFAULT_URL_PATTERN))


def normalize_urls(
    text: str,
    url_re: Pattern[str],
    placeholder: str = DEFAULT_URL_PLACEHOLDER,
) -> Tuple[str, int]:
    """
    Replace every URL in ``text`` with ``placeholder``.

    Returns
    -------
    Tuple[str, int]
        (rewritten text, number of URLs replaced)
    """
    return url_re.subn(placeholder, text)


def derive_text_features(
    text: str,
    preprocessing_cfg: Dict[str, Any],
    scorer: SentimentScorer,
    url_re: Optional[Pattern[str]] = None,
) -> Dict[str, Any]:
    """
    Compute the derived features of a single tweet.

    Parameters
    ----------
    text : str
        Raw tweet text (may be empty).
    preprocessing_cfg : Dict[str, Any]
        The "preprocessing" section of the data configuration.
    scorer : SentimentScorer
        Object providing ``score(text) -> (tone, word_count)``.
    url_re : Optional[Pattern[str]]
        Pre-compiled URL pattern; compiled from the config if None.

    Returns
    -------
    Dict[str, Any]
        The normalized text under ``text_normalized`` plus one entry per
        name in ``DERIVED_FEATURE_COLUMNS``.
    """
    if not isinstance(text, str):
        text = "" if text is None else str(text)
    if url_re is None:
        url_re = compile_url_pattern(preprocessing_cfg)

    placeholder = str(preprocessing_cfg.get("url_placeholder", DEFAULT_URL_PLACEHOLDER))
    punctuation = set(preprocessing_cfg.get("punctuation_chars", DEFAULT_PUNCTUATION))

    normalized, url_count = normalize_urls(text, url_re, placeholder)

    char_count = len(text)
    capital_count = len(_CAPITAL_RE.findall(text))
    capital_prop = capital_count / char_count if char_count > 0 else 0.0

    tone, word_count = scorer.score(normalized)

    return {
        NORMALIZED_TEXT_COLUMN: normalized,
        "url_count": url_count,
        "punct_count": sum(1 for ch in text if ch in punctuation),
        "handles_count": text.count("@"),
        "hashtag_count": text.count("#"),
        "char_count": char_count,
        "capital_count": capital_count,
        "capital_prop": float(capital_prop),
        "number_count": len(_DIGIT_RE.findall(text)),
        "tone": float(tone),
        "word_count": int(word_count),
    }


def derive_feature_frame(
    texts: pd.Series,
    preprocessing_cfg: Dict[str, Any],
    scorer: SentimentScorer,
) -> pd.DataFrame:
    """
    Apply ``derive_text_features`` to every text of a Series.

    Returns
    -------
    pd.DataFrame
        Same index as ``texts``; columns ``text_normalized`` followed by
        ``DERIVED_FEATURE_COLUMNS`` in their fixed order.
    """
    url_re = compile_url_pattern(preprocessing_cfg)
    records = [
        derive_text_features(t, preprocessing_cfg, scorer, url_re=url_re) for t in texts
    ]
    columns = [NORMALIZED_TEXT_COLUMN, *DERIVED_FEATURE_COLUMNS]
    return pd.DataFrame.from_records(records, index=texts.index, columns=columns)


def add_derived_features(
    partition: TweetPartition,
    preprocessing_cfg: Dict[str, Any],
    scorer: SentimentScorer,
) -> TweetPartition:
    """
    Return a new partition decorated with the derived feature columns.

    The raw text column is left untouched; existing columns with the same
    names are replaced.
    """
    features = derive_feature_frame(partition.texts, preprocessing_cfg, scorer)
    base = partition.frame.drop(columns=list(features.columns), errors="ignore")
    return partition.with_frame(pd.concat([base, features], axis=1))
