"""Tagging and decoding of stored embedding payloads."""

from __future__ import annotations

import json
import numbers
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from grant_monitor_core.exceptions import DecodeError
from grant_monitor_core.models.embedding import NumericEmbedding, RawEmbedding, TextEmbedding


def to_raw_embedding(value: Any) -> RawEmbedding | None:  # noqa: ANN401
    """Tag a persisted vector payload.

    Returns None for absent or empty payloads, which callers treat as
    "no embedding available" rather than as a decode failure.

    Raises:
        DecodeError: for payload types that are neither text nor a sequence.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        return TextEmbedding(text=value)
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, Sequence) and not isinstance(value, bytes | bytearray):
        if len(value) == 0:
            return None
        return NumericEmbedding(values=tuple(value))
    msg = f"Unsupported embedding payload type: {type(value).__name__}"
    raise DecodeError(msg)


def decode_embedding(raw: RawEmbedding) -> list[float]:
    """Decode a tagged payload into a numeric vector.

    Raises:
        DecodeError: if text does not hold a JSON array, or any element is
            not a number.
    """
    if isinstance(raw, NumericEmbedding):
        return _as_vector(raw.values)

    try:
        parsed = json.loads(raw.text)
    except ValueError as exc:
        msg = f"Embedding is not valid JSON: {exc}"
        raise DecodeError(msg) from exc

    if not isinstance(parsed, list):
        msg = f"Embedding JSON is a {type(parsed).__name__}, expected an array"
        raise DecodeError(msg)
    return _as_vector(parsed)


def _as_vector(items: Iterable[object]) -> list[float]:
    """Convert elements to floats, rejecting anything that is not a real number.

    Decimal elements (asyncpg's type for ``numeric[]`` columns) are accepted.
    """
    vector: list[float] = []
    for item in items:
        # bool is a numbers.Real subclass but never a vector component
        if isinstance(item, bool) or not isinstance(item, numbers.Real | Decimal):
            msg = f"Embedding holds a non-numeric element: {item!r}"
            raise DecodeError(msg)
        try:
            vector.append(float(item))
        except (OverflowError, ValueError) as exc:
            msg = f"Embedding element cannot be converted to float: {exc}"
            raise DecodeError(msg) from exc
    return vector
