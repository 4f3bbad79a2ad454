"""
Text preprocessing utilities for the bag-of-words features.

This module implements the token pipeline shared by the vocabulary builder
and the document-term encoder:

- lowercasing
- word tokenization (NLTK Treebank rules, no sentence model required)
- dropping pure-punctuation tokens
- stop-word lookup (scikit-learn or NLTK list)

Both consumers must tokenize identically, so the pipeline is exposed as a
single picklable ``TweetAnalyzer`` callable built from the "preprocessing"
section of config/data.yaml.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, Iterable, List

import nltk
from nltk.corpus import stopwords as nltk_stopwords
from nltk.tokenize import word_tokenize
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS as SKLEARN_EN_STOPWORDS


logger = logging.getLogger(__name__)

_WORD_CHAR_RE = re.compile(r"\w")

# Resource name -> path used by nltk.data.find
_NLTK_RESOURCE_PATHS: Dict[str, str] = {
    "punkt_tab": "tokenizers/punkt_tab",
    "vader_lexicon": "sentiment/vader_lexicon.zip",
    "stopwords": "corpora/stopwords",
}


# ---------------------------------------------------------------------------
# NLTK resources
# ---------------------------------------------------------------------------


def ensure_nltk_resources(names: Iterable[str], download: bool = True) -> None:
    """
    Make sure the given NLTK data packages are available.

    Parameters
    ----------
    names : Iterable[str]
        Resource names, e.g. "punkt_tab", "vader_lexicon", "stopwords".
    download : bool
        Download missing resources if True; otherwise raise.

    Raises
    ------
    LookupError
        If a resource is missing and cannot (or may not) be downloaded.
    """
    for name in names:
        path = _NLTK_RESOURCE_PATHS.get(name, name)
        try:
            nltk.data.find(path)
            continue
        except LookupError:
            if not download:
                raise

        logger.info("Downloading NLTK resource '%s'", name)
        nltk.download(name, quiet=True)
        # Raises LookupError if the download did not succeed.
        nltk.data.find(path)


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def tokenize_text(text: str, lowercase: bool = True) -> List[str]:
    """
    Split a text string into word tokens.

    Tokenization follows NLTK's Treebank rules applied to the whole string
    (``preserve_line=True``), so no sentence model is needed. Tokens without
    any alphanumeric character (pure punctuation) are dropped.

    Parameters
    ----------
    text : str
        Text string (URLs already normalized).
    lowercase : bool
        Lowercase the text before tokenizing.

    Returns
    -------
    List[str]
        List of tokens.
    """
    if not isinstance(text, str):
        text = str(text)
    if lowercase:
        text = text.lower()
    if not text.strip():
        return []
    tokens = word_tokenize(text, preserve_line=True)
    return [t for t in tokens if _WORD_CHAR_RE.search(t)]


class TweetAnalyzer:
    """
    Callable turning a raw document into its token list.

    Used as the ``analyzer`` of the document-term vectorizer and by the
    vocabulary builder, which guarantees both tokenize identically. Being
    a plain class (not a lambda) keeps fitted vectorizers picklable.
    """

    def __init__(self, lowercase: bool = True):
        self.lowercase = lowercase

    def __call__(self, text: str) -> List[str]:
        return tokenize_text(text, lowercase=self.lowercase)

    def __repr__(self) -> str:
        return f"TweetAnalyzer(lowercase={self.lowercase})"


def build_analyzer(preprocessing_cfg: Dict[str, Any]) -> TweetAnalyzer:
    """
    Build the shared analyzer from the "preprocessing" config section.
    """
    return TweetAnalyzer(lowercase=bool(preprocessing_cfg.get("lowercase", True)))


# ---------------------------------------------------------------------------
# Stopwords
# ---------------------------------------------------------------------------


def get_stopword_set(source: str = "sklearn", language: str = "english") -> FrozenSet[str]:
    """
    Build the set of stop words.

    Parameters
    ----------
    source : str
        "sklearn" for scikit-learn's English list, "nltk" for the NLTK
        corpus. If the NLTK corpus is unavailable, we fall back to
        scikit-learn's list.
    language : str
        Language name for the NLTK corpus, e.g. "english".

    Returns
    -------
    FrozenSet[str]
        Lowercased stop words.
    """
    source = (source or "sklearn").lower()

    if source == "nltk":
        try:
            return frozenset(w.lower() for w in nltk_stopwords.words(language))
        except LookupError:
            logger.warning(
                "NLTK stopwords corpus for '%s' not available; using scikit-learn list.",
                language,
            )
    elif source != "sklearn":
        raise ValueError(f"Unknown stopword source: {source!r} (expected 'sklearn' or 'nltk')")

    return frozenset(SKLEARN_EN_STOPWORDS)


def stopwords_from_config(preprocessing_cfg: Dict[str, Any]) -> FrozenSet[str]:
    """
    Resolve the stop-word set from the "preprocessing" config section.

    Returns an empty set when stop-word removal is disabled. For the NLTK
    list, a missing corpus is downloaded when
    preprocessing.sentiment.download_missing is true; if it stays
    unavailable we fall back to scikit-learn's list.
    """
    sw_cfg = preprocessing_cfg.get("stopwords", {}) or {}
    if not bool(sw_cfg.get("enabled", True)):
        return frozenset()

    source = str(sw_cfg.get("source", "sklearn")).lower()
    language = sw_cfg.get("language", "english")

    if source == "nltk":
        sentiment_cfg = preprocessing_cfg.get("sentiment", {}) or {}
        try:
            ensure_nltk_resources(
                ["stopwords"], download=bool(sentiment_cfg.get("download_missing", True))
            )
        except LookupError:
            logger.warning(
                "NLTK stopwords corpus could not be found or downloaded; using scikit-learn list."
            )
            return frozenset(SKLEARN_EN_STOPWORDS)

    return get_stopword_set(source=source, language=language)


def remove_stopwords(tokens: Iterable[str], stopword_set: FrozenSet[str]) -> List[str]:
    """
    Remove stopwords from a list of tokens (case-insensitive).
    """
    if not stopword_set:
        return list(tokens)
    return [t for t in tokens if t.lower() not in stopword_set]
