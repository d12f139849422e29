from abc import ABC, abstractmethod

from stockscan.processor.models import ProcessedDocument


class BaseQrDecoder(ABC):
    """Contract for QR code readers."""

    @abstractmethod
    def decode(self, document: ProcessedDocument) -> str | None:
        """Return the text of the first QR code found, or None.

        An unreadable image or a photo without a QR code is a normal
        outcome and must return None rather than raise.
        """


class NullQrDecoder(BaseQrDecoder):
    """Decoder used when QR scanning is switched off."""

    def decode(self, document: ProcessedDocument) -> str | None:
        _ = document
        return None
