from datetime import datetime, timedelta, timezone

from stockscan.cache.memory_cache import InMemoryAnalysisCache
from stockscan.cache.models import AuditEntry, CacheEntry
from stockscan.processor.models import (
    AnalysisSource,
    DocumentType,
    ExtractedTransaction,
    LineItem,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _make_entry(
    content_hash: str = "h1",
    document_type: DocumentType = DocumentType.TRANSACTION_INCOME,
    saved_at: datetime = NOW,
) -> CacheEntry:
    return CacheEntry(
        content_hash=content_hash,
        document_type=document_type,
        source=AnalysisSource.QR,
        payload=ExtractedTransaction(items=[LineItem(item_name="Chapa", quantity=1)]),
        saved_at=saved_at,
    )


def _make_audit(content_hash: str = "h1") -> AuditEntry:
    return AuditEntry(
        content_hash=content_hash,
        document_type=DocumentType.TRANSACTION_INCOME,
        source=AnalysisSource.QR,
        saved_at=NOW,
        size_bytes=10,
    )


class TestInMemoryAnalysisCache:
    def test_get_returns_none_when_absent(self) -> None:
        cache = InMemoryAnalysisCache()
        assert cache.get("missing", DocumentType.CONTROL_SHEET) is None

    def test_put_then_get(self) -> None:
        cache = InMemoryAnalysisCache()
        entry = _make_entry()
        cache.put(entry)
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) == entry

    def test_key_includes_document_type(self) -> None:
        cache = InMemoryAnalysisCache()
        cache.put(_make_entry())
        assert cache.get("h1", DocumentType.TRANSACTION_OUTCOME) is None

    def test_last_write_wins(self) -> None:
        cache = InMemoryAnalysisCache()
        cache.put(_make_entry(saved_at=NOW))
        later = _make_entry(saved_at=NOW + timedelta(seconds=1))
        cache.put(later)
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) == later

    def test_expired_entries_are_dropped(self) -> None:
        clock_now = [NOW]
        cache = InMemoryAnalysisCache(max_age=timedelta(days=30), clock=lambda: clock_now[0])
        cache.put(_make_entry())

        clock_now[0] = NOW + timedelta(days=29)
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) is not None

        clock_now[0] = NOW + timedelta(days=31)
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) is None

    def test_without_max_age_entries_never_expire(self) -> None:
        cache = InMemoryAnalysisCache(clock=lambda: NOW + timedelta(days=3650))
        cache.put(_make_entry())
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) is not None

    def test_audit_log_is_bounded(self) -> None:
        cache = InMemoryAnalysisCache(max_audit_entries=2)
        for index in range(3):
            cache.append_audit(_make_audit(f"h{index}"))
        assert [entry.content_hash for entry in cache.audit_entries()] == ["h1", "h2"]

    def test_clear(self) -> None:
        cache = InMemoryAnalysisCache()
        cache.put(_make_entry())
        cache.append_audit(_make_audit())
        cache.clear()
        assert cache.get("h1", DocumentType.TRANSACTION_INCOME) is None
        assert cache.audit_entries() == []


class TestStoredPayloadIsolation:
    def test_mutating_put_entry_does_not_change_cache(self) -> None:
        cache = InMemoryAnalysisCache()
        entry = _make_entry()
        cache.put(entry)

        entry.payload.items.append(LineItem(item_name="Modulo", quantity=9))

        stored = cache.get("h1", DocumentType.TRANSACTION_INCOME)
        assert stored is not None
        assert [item.item_name for item in stored.payload.items] == ["Chapa"]

    def test_mutating_returned_entry_does_not_change_cache(self) -> None:
        cache = InMemoryAnalysisCache()
        cache.put(_make_entry())

        first = cache.get("h1", DocumentType.TRANSACTION_INCOME)
        assert first is not None
        first.payload.items.clear()

        second = cache.get("h1", DocumentType.TRANSACTION_INCOME)
        assert second is not None
        assert len(second.payload.items) == 1
