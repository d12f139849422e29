import base64

from stockscan.preprocessing.base import BasePreprocessor
from stockscan.processor.models import ProcessedDocument


class PassthroughPreprocessor(BasePreprocessor):
    """Keeps the uploaded bytes untouched."""

    def preprocess(self, raw: bytes, mime_type: str) -> ProcessedDocument:
        encoded = base64.b64encode(raw).decode("ascii")
        return ProcessedDocument(
            content=raw,
            mime_type=mime_type,
            preview_ref=f"data:{mime_type};base64,{encoded}",
        )
