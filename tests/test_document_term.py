"""
Tests for document-term encoding against a frozen vocabulary.
"""

from __future__ import annotations

import numpy as np
import pytest

from disaster_tweets.errors import VocabularyMismatchError
from disaster_tweets.features import document_term
from disaster_tweets.features.document_term import encode_partitions, encode_texts
from disaster_tweets.features.vocabulary import Vocabulary


@pytest.fixture
def vocab() -> Vocabulary:
    return Vocabulary(
        terms=("fire", "flood", "smoke"),
        term_counts={"fire": 30, "flood": 12, "smoke": 10},
        doc_counts={"fire": 20, "flood": 10, "smoke": 9},
        n_documents=100,
    )


def test_counts_follow_vocabulary_order(vocab, preprocessing_cfg):
    matrix = encode_texts(["Fire fire FLOOD rain", "smoke"], vocab, preprocessing_cfg)

    assert matrix.shape == (2, 3)
    np.testing.assert_array_equal(matrix.toarray(), [[2, 1, 0], [0, 0, 1]])


def test_out_of_vocabulary_row_is_all_zero(vocab, preprocessing_cfg):
    matrix = encode_texts(["sunny beach day", ""], vocab, preprocessing_cfg)

    assert matrix.shape == (2, len(vocab))
    assert matrix.nnz == 0


def test_encode_partitions_share_columns(vocab, preprocessing_cfg):
    train, test = encode_partitions(
        ["fire and smoke", "calm"], ["flood", "fire fire", "nothing"], vocab, preprocessing_cfg
    )

    assert train.shape == (2, 3)
    assert test.shape == (3, 3)
    np.testing.assert_array_equal(test.toarray()[1], [2, 0, 0])


def test_empty_vocabulary_gives_zero_width_matrix(preprocessing_cfg):
    empty = Vocabulary(terms=(), term_counts={}, doc_counts={}, n_documents=3)
    train, test = encode_partitions(["a", "b"], ["c"], empty, preprocessing_cfg)

    assert train.shape == (2, 0)
    assert test.shape == (1, 0)


def test_encode_partitions_detects_width_mismatch(vocab, preprocessing_cfg, monkeypatch):
    import scipy.sparse as sp

    def broken_encode(texts, vocabulary, cfg):
        texts = list(texts)
        return sp.csr_matrix((len(texts), len(vocabulary) + 1))

    monkeypatch.setattr(document_term, "encode_texts", broken_encode)
    with pytest.raises(VocabularyMismatchError):
        encode_partitions(["fire"], ["flood"], vocab, preprocessing_cfg)
