from dataclasses import dataclass
from datetime import datetime

from stockscan.processor.models import AnalysisSource, DocumentType, ExtractionPayload


@dataclass(frozen=True)
class CacheEntry:
    """Stored extraction result keyed by (content_hash, document_type)."""

    content_hash: str
    document_type: DocumentType
    source: AnalysisSource
    payload: ExtractionPayload
    saved_at: datetime


@dataclass(frozen=True)
class AuditEntry:
    """Append-only provenance record, one per successful pipeline run."""

    content_hash: str
    document_type: DocumentType
    source: AnalysisSource
    saved_at: datetime
    size_bytes: int
