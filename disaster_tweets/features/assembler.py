"""
Final feature assembly: derived columns + document-term columns.

Column contract (identical for train and test):

    [url_count, punct_count, handles_count, hashtag_count, char_count,
     capital_count, capital_prop, number_count, tone, word_count,
     bow__<term_0>, ..., bow__<term_{V-1}>]

Identifier, label, raw text and normalized text columns are never features.
Downstream classifiers rely on positional alignment, so ``check_alignment``
must pass before a model fitted on train is applied to test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import scipy.sparse as sp

from disaster_tweets.data.datasets import TweetPartition
from disaster_tweets.errors import MissingColumnError, VocabularyMismatchError
from disaster_tweets.features.text_features import DERIVED_FEATURE_COLUMNS
from disaster_tweets.features.vocabulary import Vocabulary


BOW_PREFIX = "bow__"


@dataclass(frozen=True)
class AssembledMatrix:
    """
    Model-ready feature matrix of one partition.

    Attributes
    ----------
    matrix : sp.csr_matrix
        Shape (n_rows, n_features), float64.
    feature_names : Tuple[str, ...]
        Column names in order.
    ids : np.ndarray
        Row identifiers, aligned with the matrix rows.
    """

    matrix: sp.csr_matrix
    feature_names: Tuple[str, ...]
    ids: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return self.matrix.shape

    def rows(self, positions: np.ndarray) -> "AssembledMatrix":
        """
        Select a subset of rows (e.g. for a holdout split).
        """
        return AssembledMatrix(
            matrix=self.matrix[positions],
            feature_names=self.feature_names,
            ids=self.ids[positions],
        )


def feature_names_for(vocabulary: Vocabulary) -> Tuple[str, ...]:
    return DERIVED_FEATURE_COLUMNS + tuple(f"{BOW_PREFIX}{t}" for t in vocabulary.terms)


def assemble_features(
    partition: TweetPartition,
    doc_term: sp.spmatrix,
    vocabulary: Vocabulary,
) -> AssembledMatrix:
    """
    Concatenate a partition's derived features with its document-term matrix.

    Parameters
    ----------
    partition : TweetPartition
        Partition already decorated by ``add_derived_features``.
    doc_term : sp.spmatrix
        Document-term matrix of the same partition, same row order.
    vocabulary : Vocabulary
        Vocabulary the document-term matrix was encoded with.

    Raises
    ------
    MissingColumnError
        If derived feature columns are missing from the partition.
    VocabularyMismatchError
        If ``doc_term`` does not match the vocabulary width or row count.
    """
    missing = [c for c in DERIVED_FEATURE_COLUMNS if c not in partition.frame.columns]
    if missing:
        raise MissingColumnError(
            f"Partition '{partition.name}' lacks derived feature columns: {missing}"
        )
    if doc_term.shape[1] != len(vocabulary):
        raise VocabularyMismatchError(
            f"Document-term matrix of '{partition.name}' has {doc_term.shape[1]} columns; "
            f"vocabulary has {len(vocabulary)} terms."
        )
    if doc_term.shape[0] != len(partition):
        raise VocabularyMismatchError(
            f"Document-term matrix of '{partition.name}' has {doc_term.shape[0]} rows; "
            f"partition has {len(partition)}."
        )

    derived = sp.csr_matrix(
        partition.frame[list(DERIVED_FEATURE_COLUMNS)].to_numpy(dtype=np.float64)
    )
    if doc_term.shape[1] == 0:
        matrix = derived
    else:
        matrix = sp.hstack(
            [derived, sp.csr_matrix(doc_term, dtype=np.float64)],
            format="csr",
            dtype=np.float64,
        )
    return AssembledMatrix(
        matrix=matrix,
        feature_names=feature_names_for(vocabulary),
        ids=partition.ids,
    )


def check_alignment(train: AssembledMatrix, test: AssembledMatrix) -> None:
    """
    Raise ``VocabularyMismatchError`` unless both matrices share the same
    columns in the same order.
    """
    if train.feature_names != test.feature_names or train.shape[1] != test.shape[1]:
        train_only = sorted(set(train.feature_names) - set(test.feature_names))[:10]
        test_only = sorted(set(test.feature_names) - set(train.feature_names))[:10]
        raise VocabularyMismatchError(
            f"Train/test feature columns mismatch: train has {train.shape[1]} columns, "
            f"test has {test.shape[1]}. Train-only: {train_only}; test-only: {test_only}"
        )
