"""Custom exception hierarchy for grant-monitor."""

from __future__ import annotations


class GrantMonitorError(Exception):
    """Base exception for all grant-monitor errors."""


class SimilarityError(GrantMonitorError):
    """Base for failures that end a similarity resolution."""

    code: str = "SIMILARITY_ERROR"


class NotFoundError(SimilarityError):
    """Raised when the reference cluster id is unknown."""

    code = "NOT_FOUND"


class NoEmbeddingError(SimilarityError):
    """Raised when the reference cluster has no vector."""

    code = "NO_EMBEDDING"


class DecodeError(SimilarityError):
    """Raised when a stored vector payload cannot be parsed."""

    code = "DECODE_ERROR"


class RemoteError(SimilarityError):
    """Raised when an existing ranking function fails."""

    code = "REMOTE_ERROR"


class FetchError(SimilarityError):
    """Raised when reading clusters from the store fails."""

    code = "FETCH_ERROR"


class InternalError(SimilarityError):
    """Raised for any fault not covered by the other similarity errors."""

    code = "INTERNAL_ERROR"


class CapabilityMissingError(GrantMonitorError):
    """Raised by a remote ranker whose backing function does not exist.

    This is a signal to try the next strategy, not a failure.
    """
