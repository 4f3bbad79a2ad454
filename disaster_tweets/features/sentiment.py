"""
Lexicon-based sentiment scoring for tweets.

The feature deriver needs two numbers per tweet from a sentiment scorer:

- ``tone``: average polarity over the sentences of the tweet
  (negative means negative tone)
- ``word_count``: number of word tokens seen by the scorer

Any object with a ``score(text) -> (tone, word_count)`` method can be used.
The default implementation is NLTK's VADER analyzer, scoring each sentence
with its ``compound`` polarity.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, Tuple

import numpy as np
from nltk.sentiment.vader import SentimentIntensityAnalyzer
from nltk.tokenize import sent_tokenize

from disaster_tweets.features.preprocessing import ensure_nltk_resources, tokenize_text


class SentimentScorer(Protocol):
    def score(self, text: str) -> Tuple[float, int]:
        ...


class VaderSentimentScorer:
    """
    Sentence-averaged VADER polarity.

    Parameters
    ----------
    language : str
        Language of the Punkt sentence model.
    download_missing : bool
        Download the Punkt and VADER resources if they are missing.
    """

    def __init__(self, language: str = "english", download_missing: bool = True):
        ensure_nltk_resources(["punkt_tab", "vader_lexicon"], download=download_missing)
        self.language = language
        self._analyzer = SentimentIntensityAnalyzer()

    def score(self, text: str) -> Tuple[float, int]:
        if not text or not text.strip():
            return 0.0, 0

        sentences = sent_tokenize(text, language=self.language)
        if not sentences:
            return 0.0, 0

        polarities = [self._analyzer.polarity_scores(s)["compound"] for s in sentences]
        word_count = sum(len(tokenize_text(s, lowercase=False)) for s in sentences)
        return float(np.mean(polarities)), int(word_count)


def scorer_from_config(preprocessing_cfg: Dict[str, Any]) -> VaderSentimentScorer:
    sentiment_cfg = preprocessing_cfg.get("sentiment", {}) or {}
    return VaderSentimentScorer(
        language=str(sentiment_cfg.get("language", "english")),
        download_missing=bool(sentiment_cfg.get("download_missing", True)),
    )
