from stockscan.config.settings import Settings
from stockscan.ocr.base import BaseLocalOcrAnalyzer, NullOcrAnalyzer
from stockscan.ocr.tesseract_analyzer import TesseractOcrAnalyzer


class LocalOcrAnalyzerFactory:
    """Creates the configured local OCR analyzer."""

    ENGINES = ("tesseract", "none")

    @classmethod
    def create(cls, settings: Settings) -> BaseLocalOcrAnalyzer:
        engine = settings.local_ocr_engine.lower()
        if engine == "tesseract":
            languages = [
                lang.strip() for lang in settings.ocr_languages.split(",") if lang.strip()
            ]
            return TesseractOcrAnalyzer(languages=languages)
        if engine == "none":
            return NullOcrAnalyzer()
        raise ValueError(
            f"Unknown local OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
