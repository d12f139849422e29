from abc import ABC, abstractmethod

from stockscan.processor.models import ProcessedDocument


class BasePreprocessor(ABC):
    """Contract for document preprocessing adapters."""

    @abstractmethod
    def preprocess(self, raw: bytes, mime_type: str) -> ProcessedDocument:
        """Turn an uploaded file into the bytes that get hashed and analyzed.

        Args:
            raw: File content as uploaded.
            mime_type: Declared content type of the upload.

        Returns:
            ProcessedDocument with processed bytes and a preview reference.

        Raises:
            PreprocessingError: if the file cannot be read.
        """
