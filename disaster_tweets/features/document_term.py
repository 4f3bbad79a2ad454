"""
Document-term encoding against a frozen vocabulary.

This module provides helpers to:
- build a scikit-learn CountVectorizer pinned to a ``Vocabulary``
- transform texts into sparse raw-count matrices
- encode the train and test partitions against the same vocabulary

Column j of the output holds the raw count of vocabulary term j in the
row's tokens; out-of-vocabulary tokens are ignored.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Tuple

import numpy as np
import scipy.sparse as sp
from sklearn.feature_extraction.text import CountVectorizer

from disaster_tweets.errors import VocabularyMismatchError
from disaster_tweets.features.preprocessing import build_analyzer
from disaster_tweets.features.vocabulary import Vocabulary


def build_count_vectorizer(
    vocabulary: Vocabulary,
    preprocessing_cfg: Dict[str, Any],
) -> CountVectorizer:
    """
    Construct a CountVectorizer whose columns follow ``vocabulary``.

    The analyzer is the same one the vocabulary builder used, so tokens are
    produced identically at build and encode time. No fitting is needed.
    """
    return CountVectorizer(
        analyzer=build_analyzer(preprocessing_cfg),
        vocabulary=dict(vocabulary.index),
        dtype=np.int64,
    )


def encode_texts(
    texts: Iterable[str],
    vocabulary: Vocabulary,
    preprocessing_cfg: Dict[str, Any],
) -> sp.csr_matrix:
    """
    Transform texts into a sparse document-term count matrix.

    Returns
    -------
    sp.csr_matrix
        Shape (n_texts, len(vocabulary)).
    """
    texts = list(texts)
    if len(vocabulary) == 0:
        # CountVectorizer rejects an empty vocabulary.
        return sp.csr_matrix((len(texts), 0), dtype=np.int64)

    vectorizer = build_count_vectorizer(vocabulary, preprocessing_cfg)
    return sp.csr_matrix(vectorizer.transform(texts))


def encode_partitions(
    train_texts: Iterable[str],
    test_texts: Iterable[str],
    vocabulary: Vocabulary,
    preprocessing_cfg: Dict[str, Any],
) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    Encode the train and test texts against the same frozen vocabulary.

    Returns
    -------
    Tuple[sp.csr_matrix, sp.csr_matrix]
        (train_matrix, test_matrix) with identical column counts.

    Raises
    ------
    VocabularyMismatchError
        If the two matrices do not have ``len(vocabulary)`` columns.
    """
    train_matrix = encode_texts(train_texts, vocabulary, preprocessing_cfg)
    test_matrix = encode_texts(test_texts, vocabulary, preprocessing_cfg)

    expected = len(vocabulary)
    if train_matrix.shape[1] != expected or test_matrix.shape[1] != expected:
        raise VocabularyMismatchError(
            f"Document-term matrices have {train_matrix.shape[1]} (train) and "
            f"{test_matrix.shape[1]} (test) columns; vocabulary has {expected} terms."
        )
    return train_matrix, test_matrix
