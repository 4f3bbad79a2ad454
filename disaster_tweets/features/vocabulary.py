"""
Vocabulary construction with frequency pruning.

The vocabulary is built once from the URL-normalized texts of the train and
test partitions combined:

1. lowercase and tokenize every text (see ``features.preprocessing``)
2. count, per term, total occurrences and the number of documents containing it
3. drop stop words
4. drop terms with count < min_term_count, or whose document proportion is
   above max_doc_prop or below min_doc_prop (proportions over the combined
   corpus)
5. freeze the survivors in lexicographic order

Using the combined corpus exposes which terms occur in the test texts (never
their labels) to feature construction, in exchange for better term coverage.
Sorting makes column indices independent of row order.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from disaster_tweets.errors import EmptyTextError
from disaster_tweets.features.preprocessing import build_analyzer, stopwords_from_config


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """
    Frozen set of retained terms and their corpus statistics.

    Attributes
    ----------
    terms : Tuple[str, ...]
        Retained terms in column order (lexicographic).
    term_counts : Mapping[str, int]
        Total occurrences of each retained term.
    doc_counts : Mapping[str, int]
        Number of documents containing each retained term.
    n_documents : int
        Number of documents in the corpus the vocabulary was built from.
    """

    terms: Tuple[str, ...]
    term_counts: Mapping[str, int]
    doc_counts: Mapping[str, int]
    n_documents: int

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: object) -> bool:
        return term in self.index

    @cached_property
    def index(self) -> Mapping[str, int]:
        """Term -> column index."""
        return MappingProxyType({term: i for i, term in enumerate(self.terms)})

    def doc_prop(self, term: str) -> float:
        return self.doc_counts[term] / self.n_documents

    def to_frame(self) -> pd.DataFrame:
        """
        Tabular view with columns term, count, doc_count, doc_prop.
        """
        return pd.DataFrame(
            {
                "term": list(self.terms),
                "count": [self.term_counts[t] for t in self.terms],
                "doc_count": [self.doc_counts[t] for t in self.terms],
                "doc_prop": [self.doc_prop(t) for t in self.terms],
            }
        )


def compute_term_statistics(
    token_lists: Iterable[List[str]],
) -> Tuple[Counter, Counter, int]:
    """
    Count term occurrences and document frequencies.

    Returns
    -------
    Tuple[Counter, Counter, int]
        (term_counts, doc_counts, n_documents)
    """
    term_counts: Counter = Counter()
    doc_counts: Counter = Counter()
    n_documents = 0
    for tokens in token_lists:
        n_documents += 1
        term_counts.update(tokens)
        doc_counts.update(set(tokens))
    return term_counts, doc_counts, n_documents


def prune_terms(
    term_counts: Mapping[str, int],
    doc_counts: Mapping[str, int],
    n_documents: int,
    min_term_count: int = 10,
    min_doc_prop: float = 0.001,
    max_doc_prop: float = 0.5,
    stopword_set: FrozenSet[str] = frozenset(),
) -> List[str]:
    """
    Apply stop-word removal and frequency pruning.

    A term is kept iff it is not a stop word, its count is at least
    ``min_term_count`` and its document proportion lies within
    ``[min_doc_prop, max_doc_prop]``.

    Returns
    -------
    List[str]
        Retained terms, sorted lexicographically.
    """
    if not 0.0 <= min_doc_prop <= max_doc_prop <= 1.0:
        raise ValueError(
            "Document proportion bounds must satisfy 0 <= min_doc_prop <= max_doc_prop <= 1, "
            f"got min_doc_prop={min_doc_prop}, max_doc_prop={max_doc_prop}"
        )
    if n_documents <= 0:
        return []

    kept = []
    for term, count in term_counts.items():
        if term.lower() in stopword_set:
            continue
        if count < min_term_count:
            continue
        prop = doc_counts[term] / n_documents
        if prop > max_doc_prop or prop < min_doc_prop:
            continue
        kept.append(term)
    return sorted(kept)


def build_vocabulary(
    texts: Iterable[str],
    preprocessing_cfg: Dict[str, Any],
    vocabulary_cfg: Dict[str, Any],
    stopword_set: Optional[FrozenSet[str]] = None,
) -> Vocabulary:
    """
    Build the frozen vocabulary from a corpus of normalized texts.

    Parameters
    ----------
    texts : Iterable[str]
        Normalized texts of the train and test partitions combined.
    preprocessing_cfg : Dict[str, Any]
        The "preprocessing" section of the data configuration.
    vocabulary_cfg : Dict[str, Any]
        The "vocabulary" section (min_term_count, min_doc_prop, max_doc_prop).
    stopword_set : Optional[FrozenSet[str]]
        Stop words to drop; resolved from the config if None.

    Returns
    -------
    Vocabulary
        Frozen vocabulary.

    Raises
    ------
    EmptyTextError
        If the corpus contains no documents.
    """
    analyzer = build_analyzer(preprocessing_cfg)
    if stopword_set is None:
        stopword_set = stopwords_from_config(preprocessing_cfg)

    term_counts, doc_counts, n_documents = compute_term_statistics(
        analyzer(text) for text in texts
    )
    if n_documents == 0:
        raise EmptyTextError("Cannot build a vocabulary from an empty corpus.")

    terms = prune_terms(
        term_counts,
        doc_counts,
        n_documents,
        min_term_count=int(vocabulary_cfg.get("min_term_count", 10)),
        min_doc_prop=float(vocabulary_cfg.get("min_doc_prop", 0.001)),
        max_doc_prop=float(vocabulary_cfg.get("max_doc_prop", 0.5)),
        stopword_set=stopword_set,
    )

    logger.info(
        "Vocabulary: %d distinct terms in %d documents, %d retained after pruning",
        len(term_counts),
        n_documents,
        len(terms),
    )
    if not terms:
        logger.warning("Vocabulary is empty after pruning; only derived features will be used.")

    return Vocabulary(
        terms=tuple(terms),
        term_counts=MappingProxyType({t: term_counts[t] for t in terms}),
        doc_counts=MappingProxyType({t: doc_counts[t] for t in terms}),
        n_documents=n_documents,
    )
