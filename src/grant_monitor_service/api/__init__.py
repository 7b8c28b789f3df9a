"""HTTP boundary for similarity resolution."""

from grant_monitor_service.api.app import create_app

__all__ = ["create_app"]
