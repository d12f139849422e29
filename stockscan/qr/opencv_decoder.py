import cv2
import numpy as np

from stockscan.logging.logger import Log
from stockscan.processor.models import ProcessedDocument
from stockscan.qr.base import BaseQrDecoder


class OpenCvQrDecoder(BaseQrDecoder):
    """QR reader built on OpenCV's QRCodeDetector."""

    def __init__(self) -> None:
        self._detector = cv2.QRCodeDetector()

    def decode(self, document: ProcessedDocument) -> str | None:
        if not document.mime_type.startswith("image/"):
            return None
        buffer = np.frombuffer(document.content, dtype=np.uint8)
        try:
            image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
            if image is None:
                Log.debug("QR decode skipped: image bytes could not be decoded")
                return None
            text, _points, _straight = self._detector.detectAndDecode(image)
        except cv2.error as exc:
            Log.debug(f"QR decode failed: {exc}")
            return None
        return text or None
