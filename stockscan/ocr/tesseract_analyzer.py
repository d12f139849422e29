import io

import pytesseract
from PIL import Image, UnidentifiedImageError

from stockscan.logging.logger import Log
from stockscan.ocr.base import BaseLocalOcrAnalyzer
from stockscan.ocr.exceptions import LocalOcrError
from stockscan.ocr.line_parser import parse_control_lines, parse_transaction_lines, split_lines
from stockscan.processor.models import ControlRows, ExtractedTransaction, ProcessedDocument


class TesseractOcrAnalyzer(BaseLocalOcrAnalyzer):
    """Offline analyzer: Tesseract text recognition plus line heuristics.

    Languages are tried in order until one yields text. A document that
    cannot be decoded as an image produces an empty result.
    """

    PAGE_SEGMENTATION_MODE = 6

    def __init__(self, languages: list[str] | None = None) -> None:
        self._languages = languages or ["spa", "eng"]

    def analyze_transaction(self, document: ProcessedDocument) -> ExtractedTransaction:
        lines = split_lines(self._recognize(document))
        if not lines:
            return ExtractedTransaction()
        return parse_transaction_lines(lines)

    def analyze_control_sheet(self, document: ProcessedDocument) -> ControlRows:
        lines = split_lines(self._recognize(document))
        if not lines:
            return []
        return parse_control_lines(lines)

    def _recognize(self, document: ProcessedDocument) -> str:
        try:
            image = Image.open(io.BytesIO(document.content))
            image.load()
        except UnidentifiedImageError:
            Log.warning("Local OCR skipped: document is not a readable image")
            return ""

        config = f"--psm {self.PAGE_SEGMENTATION_MODE}"
        for lang in self._languages:
            try:
                text = pytesseract.image_to_string(image, lang=lang, config=config)
            except pytesseract.TesseractNotFoundError as exc:
                raise LocalOcrError(f"Tesseract is not installed or not in PATH: {exc}") from exc
            except pytesseract.TesseractError as exc:
                Log.warning(f"Local OCR failed for language '{lang}': {exc}")
                continue
            if text.strip():
                Log.debug(f"Local OCR text ({lang}):\n{text}")
                return text
        return ""
