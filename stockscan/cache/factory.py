from datetime import timedelta

from stockscan.cache.base import BaseAnalysisCache
from stockscan.cache.memory_cache import InMemoryAnalysisCache
from stockscan.cache.postgres_cache import PostgresAnalysisCache
from stockscan.config.settings import Settings


class AnalysisCacheFactory:
    """Creates the configured analysis cache backend."""

    BACKENDS = ("memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisCache:
        backend = settings.cache_backend.lower()
        if backend == "memory":
            max_age = (
                timedelta(days=settings.cache_max_age_days)
                if settings.cache_max_age_days > 0
                else None
            )
            return InMemoryAnalysisCache(
                max_age=max_age,
                max_audit_entries=settings.audit_max_entries,
            )
        if backend == "postgres":
            return PostgresAnalysisCache()
        raise ValueError(
            f"Unknown cache backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
