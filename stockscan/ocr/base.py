from abc import ABC, abstractmethod

from stockscan.processor.models import (
    ControlRows,
    DocumentType,
    ExtractedTransaction,
    ExtractionPayload,
    ProcessedDocument,
)


class BaseLocalOcrAnalyzer(ABC):
    """Contract for offline, best-effort document analyzers."""

    @abstractmethod
    def analyze_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        """Return whatever items could be read; an empty result means no signal.

        Raises:
            LocalOcrError: only on hard I/O failure.
        """

    @abstractmethod
    def analyze_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        """Return whatever rows could be read; an empty list means no signal.

        Raises:
            LocalOcrError: only on hard I/O failure.
        """

    def analyze(self, document: ProcessedDocument, document_type: DocumentType) -> ExtractionPayload:
        if document_type.is_control_sheet:
            return self.analyze_control_sheet(document)
        return self.analyze_transaction(document)


class NullOcrAnalyzer(BaseLocalOcrAnalyzer):
    """Analyzer used when local OCR is switched off; never finds anything."""

    def analyze_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        _ = document
        return ExtractedTransaction()

    def analyze_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        _ = document
        return []
