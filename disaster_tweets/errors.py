"""
Exception types raised by the disaster-tweet pipeline.

Every error derives from both ``TweetPipelineError`` and ``ValueError`` so
callers can catch either the project-specific base class or the generic
``ValueError`` used for bad inputs elsewhere in the code base.

Row-level problems carry the offending row ids in ``row_ids`` so malformed
input can be fixed at the source instead of being silently dropped.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class TweetPipelineError(ValueError):
    """
    Base class for all pipeline errors.

    Parameters
    ----------
    message : str
        Human-readable description of the problem.
    row_ids : Optional[Iterable]
        Identifiers of the rows that triggered the error, if any.
    """

    def __init__(self, message: str, row_ids: Optional[Iterable] = None):
        self.row_ids: List = list(row_ids) if row_ids is not None else []
        if self.row_ids:
            message = f"{message} (row ids: {_format_ids(self.row_ids)})"
        super().__init__(message)


class MissingColumnError(TweetPipelineError):
    """A required column is absent from an input table or feature frame."""


class EmptyTextError(TweetPipelineError):
    """Text is empty where the configured policy does not allow it."""


class VocabularyMismatchError(TweetPipelineError):
    """Train and test feature matrices do not share the same columns."""


class MalformedInputFileError(TweetPipelineError):
    """An input file cannot be parsed or contains invalid rows."""


def _format_ids(row_ids: List, limit: int = 20) -> str:
    shown = ", ".join(str(r) for r in row_ids[:limit])
    if len(row_ids) > limit:
        shown += f", ... ({len(row_ids) - limit} more)"
    return shown
