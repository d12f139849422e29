import io

from PIL import Image, ImageOps, UnidentifiedImageError

from stockscan.logging.logger import Log
from stockscan.preprocessing.base import BasePreprocessor
from stockscan.preprocessing.exceptions import PreprocessingError
from stockscan.preprocessing.passthrough import PassthroughPreprocessor
from stockscan.processor.models import ProcessedDocument


class PillowPreprocessor(BasePreprocessor):
    """Downscales and re-encodes photos so identical uploads hash identically.

    EXIF orientation is applied, images are converted to RGB, the longest
    edge is capped and the result is stored as JPEG. Non-image files pass
    through unchanged.
    """

    OUTPUT_MIME = "image/jpeg"

    def __init__(self, max_edge: int = 1024, quality: int = 70) -> None:
        self._max_edge = max_edge
        self._quality = max(1, min(95, quality))
        self._passthrough = PassthroughPreprocessor()

    def preprocess(self, raw: bytes, mime_type: str) -> ProcessedDocument:
        if not mime_type.startswith("image/"):
            return self._passthrough.preprocess(raw, mime_type)

        try:
            with Image.open(io.BytesIO(raw)) as image:
                image = ImageOps.exif_transpose(image)
                image = image.convert("RGB")
                image.thumbnail((self._max_edge, self._max_edge), Image.Resampling.LANCZOS)
                buf = io.BytesIO()
                image.save(buf, format="JPEG", quality=self._quality, optimize=True)
        except (UnidentifiedImageError, OSError) as exc:
            raise PreprocessingError(f"Cannot read image: {exc}") from exc

        content = buf.getvalue()
        Log.debug(f"Preprocessed image: {len(raw)} -> {len(content)} bytes")
        return self._passthrough.preprocess(content, self.OUTPUT_MIME)
