"""Public interface re-exports for grant_monitor_core."""

from grant_monitor_core.interfaces.ranker import RemoteRanker
from grant_monitor_core.interfaces.store import ClusterStore

__all__ = [
    "ClusterStore",
    "RemoteRanker",
]
