import io

import pytest
from PIL import Image

from stockscan.config.settings import Settings
from stockscan.preprocessing.exceptions import PreprocessingError
from stockscan.preprocessing.factory import PreprocessorFactory
from stockscan.preprocessing.passthrough import PassthroughPreprocessor
from stockscan.preprocessing.pillow_preprocessor import PillowPreprocessor


class TestPassthroughPreprocessor:
    def test_keeps_bytes_and_builds_data_url(self) -> None:
        document = PassthroughPreprocessor().preprocess(b"abc", "application/pdf")
        assert document.content == b"abc"
        assert document.mime_type == "application/pdf"
        assert document.preview_ref == "data:application/pdf;base64,YWJj"


class TestPillowPreprocessor:
    def test_reencodes_image_as_jpeg(self, png_bytes: bytes) -> None:
        document = PillowPreprocessor().preprocess(png_bytes, "image/png")
        assert document.mime_type == "image/jpeg"
        assert document.preview_ref.startswith("data:image/jpeg;base64,")
        with Image.open(io.BytesIO(document.content)) as image:
            assert image.format == "JPEG"

    def test_downscales_to_max_edge(self, large_png_bytes: bytes) -> None:
        document = PillowPreprocessor(max_edge=600).preprocess(large_png_bytes, "image/png")
        with Image.open(io.BytesIO(document.content)) as image:
            assert max(image.size) == 600
            assert image.size == (600, 300)

    def test_same_input_gives_same_bytes(self, png_bytes: bytes) -> None:
        preprocessor = PillowPreprocessor()
        first = preprocessor.preprocess(png_bytes, "image/png")
        second = preprocessor.preprocess(png_bytes, "image/png")
        assert first.content == second.content

    def test_non_image_passes_through(self) -> None:
        document = PillowPreprocessor().preprocess(b"%PDF-1.4", "application/pdf")
        assert document.content == b"%PDF-1.4"
        assert document.mime_type == "application/pdf"

    def test_unreadable_image_raises(self) -> None:
        with pytest.raises(PreprocessingError, match="Cannot read image"):
            PillowPreprocessor().preprocess(b"not an image", "image/jpeg")


class TestPreprocessorFactory:
    def test_creates_pillow(self) -> None:
        assert isinstance(PreprocessorFactory.create(Settings(preprocess_engine="pillow")), PillowPreprocessor)

    def test_creates_passthrough(self) -> None:
        assert isinstance(
            PreprocessorFactory.create(Settings(preprocess_engine="passthrough")),
            PassthroughPreprocessor,
        )

    def test_unknown_engine_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown preprocess engine"):
            PreprocessorFactory.create(Settings(preprocess_engine="magick"))
