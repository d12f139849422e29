from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from stockscan.processor.models import (
    AnalysisSource,
    DocumentType,
    ExtractionPayload,
    ProcessedDocument,
    payload_is_empty,
)


class StageStatus(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    EMPTY = "empty"
    FOUND = "found"


@dataclass(frozen=True)
class StageResult:
    """Outcome of one extraction stage, keeping "not tried" apart from "found nothing"."""

    status: StageStatus = StageStatus.NOT_ATTEMPTED
    payload: ExtractionPayload | None = None

    @classmethod
    def not_attempted(cls) -> "StageResult":
        return cls()

    @classmethod
    def empty(cls) -> "StageResult":
        return cls(status=StageStatus.EMPTY)

    @classmethod
    def of(cls, payload: ExtractionPayload | None) -> "StageResult":
        """FOUND when payload is non-empty by the document-type rule, else EMPTY."""
        if payload_is_empty(payload):
            return cls.empty()
        return cls(status=StageStatus.FOUND, payload=payload)

    @property
    def attempted(self) -> bool:
        return self.status is not StageStatus.NOT_ATTEMPTED

    @property
    def found(self) -> bool:
        return self.status is StageStatus.FOUND


class ExtractionState(str, Enum):
    RECEIVED = "received"
    HASHED = "hashed"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    QR_RESOLVED = "qr_resolved"
    QR_EMPTY = "qr_empty"
    LOCAL_NON_EMPTY = "local_non_empty"
    LOCAL_EMPTY = "local_empty"
    REMOTE_SKIPPED = "remote_skipped"
    REMOTE_RESOLVED = "remote_resolved"
    REMOTE_FAILED = "remote_failed"
    FAILED = "failed"
    COMMITTED = "committed"


@dataclass(slots=True)
class ExtractionContext:
    raw_bytes: bytes
    mime_type: str
    document_type: DocumentType
    allow_remote: bool
    state: ExtractionState = ExtractionState.RECEIVED
    document: ProcessedDocument | None = None
    content_hash: str = ""
    source: AnalysisSource | None = None
    payload: ExtractionPayload | None = None
    from_cache: bool = False
    provider: str | None = None
    saved_at: datetime | None = None
    qr: StageResult = field(default_factory=StageResult.not_attempted)
    local: StageResult = field(default_factory=StageResult.not_attempted)
    remote: StageResult = field(default_factory=StageResult.not_attempted)
    error_message: str = ""

    @property
    def resolved(self) -> bool:
        return self.source is not None and self.payload is not None

    def resolve(
        self,
        source: AnalysisSource,
        payload: ExtractionPayload,
        state: ExtractionState,
    ) -> None:
        self.source = source
        self.payload = payload
        self.state = state


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ExtractionContext) -> ExtractionContext:
        raise NotImplementedError
