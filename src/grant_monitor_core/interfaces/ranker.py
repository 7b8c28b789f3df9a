"""Abstract remote ranking strategy interface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RemoteRanker(Protocol):
    """A ranking capability that lives outside the process (e.g. a SQL function).

    Implementations raise when the call fails. A failure that means the
    capability does not exist is recognised by ``is_capability_missing``.
    """

    name: str
    score_fields: tuple[str, ...]

    async def rank(
        self, vector: list[float], threshold: float, limit: int
    ) -> list[Mapping[str, Any]]:
        """Return rows for clusters similar to vector, best first."""
        ...
