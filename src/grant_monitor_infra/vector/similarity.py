"""Brute-force cosine similarity for the local fallback path."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Compute cosine similarity between two equal-length vectors.

    A zero vector has no similarity to anything, so 0.0 is returned when
    either squared norm is exactly zero.

    Raises:
        ValueError: if the vectors differ in length.
    """
    if len(vec_a) != len(vec_b):
        msg = f"vector length mismatch: {len(vec_a)} != {len(vec_b)}"
        raise ValueError(msg)

    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    dot = np.dot(a, b)
    norm_a = np.dot(a, a)
    norm_b = np.dot(b, b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(dot / (np.sqrt(norm_a) * np.sqrt(norm_b)))
