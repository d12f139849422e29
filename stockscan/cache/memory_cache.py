import copy
import threading
from collections import deque
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from stockscan.cache.base import BaseAnalysisCache
from stockscan.cache.models import AuditEntry, CacheEntry
from stockscan.processor.models import DocumentType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAnalysisCache(BaseAnalysisCache):
    """Process-local cache with optional max-age expiry and a bounded audit log.

    Entries are copied on the way in and out so callers never share the
    stored payload lists.
    """

    def __init__(
        self,
        *,
        max_age: timedelta | None = None,
        max_audit_entries: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._max_age = max_age
        self._clock = clock
        self._entries: dict[tuple[str, DocumentType], CacheEntry] = {}
        self._audit: deque[AuditEntry] = deque(maxlen=max_audit_entries or None)
        self._lock = threading.Lock()

    def get(self, content_hash: str, document_type: DocumentType) -> CacheEntry | None:
        key = (content_hash, document_type)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry):
                del self._entries[key]
                return None
            return copy.deepcopy(entry)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[(entry.content_hash, entry.document_type)] = copy.deepcopy(entry)

    def append_audit(self, entry: AuditEntry) -> None:
        with self._lock:
            self._audit.append(entry)

    def audit_entries(self) -> list[AuditEntry]:
        with self._lock:
            return list(self._audit)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._audit.clear()

    def _is_expired(self, entry: CacheEntry) -> bool:
        if self._max_age is None:
            return False
        return self._clock() - entry.saved_at > self._max_age
