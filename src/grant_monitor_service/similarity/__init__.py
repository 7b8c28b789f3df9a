"""Similarity resolution over grant cluster embeddings."""

from grant_monitor_service.similarity.factories import create_resolver
from grant_monitor_service.similarity.fetcher import CandidateFetcher
from grant_monitor_service.similarity.resolver import SimilarityResolver

__all__ = [
    "CandidateFetcher",
    "SimilarityResolver",
    "create_resolver",
]
