"""Stored embedding payloads, tagged by their persisted representation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TextEmbedding:
    """Embedding persisted as text, expected to hold a JSON array of numbers."""

    text: str


@dataclass(frozen=True)
class NumericEmbedding:
    """Embedding persisted as a native numeric sequence."""

    values: tuple[float, ...]


RawEmbedding = TextEmbedding | NumericEmbedding
