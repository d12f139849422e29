from abc import ABC, abstractmethod

from stockscan.cache.models import AuditEntry, CacheEntry
from stockscan.processor.models import DocumentType


class BaseAnalysisCache(ABC):
    """Contract for content-addressed analysis storage."""

    @abstractmethod
    def get(self, content_hash: str, document_type: DocumentType) -> CacheEntry | None:
        """Return the stored entry for this content and document type, if any.

        Raises:
            Any storage error unchanged; callers never mask storage failures.
        """

    @abstractmethod
    def put(self, entry: CacheEntry) -> None:
        """Store an entry. Concurrent puts for the same key are last-write-wins."""

    @abstractmethod
    def append_audit(self, entry: AuditEntry) -> None:
        """Append a provenance record."""
