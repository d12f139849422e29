from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from stockscan.cache.base import BaseAnalysisCache
from stockscan.cache.models import AuditEntry, CacheEntry
from stockscan.database.connection import get_connection
from stockscan.processor.models import AnalysisSource, DocumentType
from stockscan.processor.serialization import payload_from_json, payload_to_json

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS scan_cache (
    content_hash TEXT NOT NULL,
    doc_type TEXT NOT NULL,
    source TEXT NOT NULL,
    payload JSONB NOT NULL,
    saved_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (content_hash, doc_type)
);
CREATE TABLE IF NOT EXISTS scan_audit (
    id BIGSERIAL PRIMARY KEY,
    content_hash TEXT NOT NULL,
    doc_type TEXT NOT NULL,
    source TEXT NOT NULL,
    saved_at TIMESTAMPTZ NOT NULL,
    size_bytes INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_scan_audit_content_hash ON scan_audit (content_hash);
"""


class PostgresAnalysisCache(BaseAnalysisCache):
    """Database operations for the scan_cache and scan_audit tables."""

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with get_connection() as conn:
            conn.execute(SCHEMA_SQL)
            conn.commit()

    def get(self, content_hash: str, document_type: DocumentType) -> CacheEntry | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT content_hash, doc_type, source, payload, saved_at
                    FROM scan_cache
                    WHERE content_hash = %s AND doc_type = %s
                    """,
                    (content_hash, document_type.value),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return CacheEntry(
            content_hash=row["content_hash"],
            document_type=DocumentType(row["doc_type"]),
            source=AnalysisSource(row["source"]),
            payload=payload_from_json(row["payload"], document_type),
            saved_at=row["saved_at"],
        )

    def put(self, entry: CacheEntry) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO scan_cache (content_hash, doc_type, source, payload, saved_at)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (content_hash, doc_type) DO UPDATE
                SET source = EXCLUDED.source,
                    payload = EXCLUDED.payload,
                    saved_at = EXCLUDED.saved_at
                """,
                (
                    entry.content_hash,
                    entry.document_type.value,
                    entry.source.value,
                    Jsonb(payload_to_json(entry.payload)),
                    entry.saved_at,
                ),
            )
            conn.commit()

    def append_audit(self, entry: AuditEntry) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO scan_audit (content_hash, doc_type, source, saved_at, size_bytes)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (
                    entry.content_hash,
                    entry.document_type.value,
                    entry.source.value,
                    entry.saved_at,
                    entry.size_bytes,
                ),
            )
            conn.commit()

    def count_audit_entries(self, content_hash: str) -> int:
        """Number of audit records for a hash. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM scan_audit WHERE content_hash = %s",
                    (content_hash,),
                )
                row = cur.fetchone()
        return int(row[0]) if row else 0
