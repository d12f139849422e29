import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DocumentType(str, Enum):
    """Kind of paper document being analyzed."""

    TRANSACTION_INCOME = "TRANSACTION_INCOME"
    TRANSACTION_OUTCOME = "TRANSACTION_OUTCOME"
    CONTROL_SHEET = "CONTROL_SHEET"

    @property
    def is_control_sheet(self) -> bool:
        return self is DocumentType.CONTROL_SHEET


class AnalysisSource(str, Enum):
    """Stage that produced an extraction result."""

    QR = "qr"
    OCR = "ocr"
    REMOTE = "remote"


class ItemType(str, Enum):
    CHAPA = "CHAPA"
    MODULO = "MODULO"


@dataclass(frozen=True)
class ProcessedDocument:
    """Preprocessed document bytes plus a human-previewable rendering reference."""

    content: bytes
    mime_type: str = "image/jpeg"
    preview_ref: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class LineItem:
    """A single line of a delivery note."""

    item_name: str
    quantity: int
    item_type: ItemType = ItemType.MODULO


@dataclass(frozen=True)
class ExtractedTransaction:
    """Items and optional destination read from an income/outcome document."""

    items: list[LineItem] = field(default_factory=list)
    destination: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class ExtractedControlRow:
    """A single row of a control sheet."""

    delivery_date: str
    model: str
    quantity: int
    destination: str | None = None


ControlRows = list[ExtractedControlRow]
ExtractionPayload = ExtractedTransaction | ControlRows


def payload_is_empty(payload: ExtractionPayload | None) -> bool:
    """Apply the per-document-type emptiness rule."""
    if payload is None:
        return True
    if isinstance(payload, ExtractedTransaction):
        return payload.is_empty
    return len(payload) == 0


def payload_size(payload: ExtractionPayload) -> int:
    if isinstance(payload, ExtractedTransaction):
        return len(payload.items)
    return len(payload)


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of one extraction pipeline run."""

    content_hash: str
    document_type: DocumentType
    source: AnalysisSource
    payload: ExtractionPayload
    from_cache: bool
    document: ProcessedDocument
    provider: str | None = None
    analyzed_at: datetime | None = None

    @property
    def used_remote(self) -> bool:
        return self.source is AnalysisSource.REMOTE
