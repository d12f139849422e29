from stockscan.logging.logger import Log
from stockscan.normalization.merge import normalize_payload
from stockscan.processor.models import DocumentType, ExtractionPayload, ProcessedDocument
from stockscan.processor.pipeline import StageResult
from stockscan.qr.base import BaseQrDecoder
from stockscan.qr.parser import parse_qr_payload


class QrExtractor:
    """Short-circuits extraction when the document carries a readable QR payload."""

    def __init__(self, decoder: BaseQrDecoder) -> None:
        self._decoder = decoder

    def try_decode(self, document: ProcessedDocument) -> str | None:
        return self._decoder.decode(document)

    def parse(self, raw_text: str, document_type: DocumentType) -> ExtractionPayload | None:
        return parse_qr_payload(raw_text, document_type)

    def extract(self, document: ProcessedDocument, document_type: DocumentType) -> StageResult:
        """Decode and parse; EMPTY when there is no QR or it yields no valid rows."""
        raw_text = self.try_decode(document)
        if raw_text is None:
            Log.info("No QR code detected")
            return StageResult.empty()
        parsed = self.parse(raw_text, document_type)
        if parsed is None:
            Log.info("QR code found but it holds no usable rows")
            return StageResult.empty()
        return StageResult.of(normalize_payload(parsed))
