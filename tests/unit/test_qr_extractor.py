from unittest.mock import MagicMock

import pytest

from stockscan.config.settings import Settings
from stockscan.processor.models import DocumentType, ProcessedDocument
from stockscan.processor.pipeline import StageStatus
from stockscan.qr.base import BaseQrDecoder, NullQrDecoder
from stockscan.qr.extractor import QrExtractor
from stockscan.qr.factory import QrDecoderFactory
from stockscan.qr.opencv_decoder import OpenCvQrDecoder


def _make_decoder(text: str | None) -> MagicMock:
    decoder = MagicMock(spec=BaseQrDecoder)
    decoder.decode.return_value = text
    return decoder


def _make_document() -> ProcessedDocument:
    return ProcessedDocument(content=b"img", mime_type="image/jpeg")


class TestQrExtractor:
    def test_found_payload_is_normalized(self) -> None:
        extractor = QrExtractor(
            _make_decoder('{"items":[{"itemName":"Chapa JC 250","quantity":2},{"itemName":"chapa jc-250","quantity":3}]}')
        )
        result = extractor.extract(_make_document(), DocumentType.TRANSACTION_INCOME)

        assert result.status is StageStatus.FOUND
        assert result.payload is not None
        assert len(result.payload.items) == 1
        assert result.payload.items[0].item_name == "Chapa JC250"
        assert result.payload.items[0].quantity == 5

    def test_no_qr_is_empty_not_error(self) -> None:
        result = QrExtractor(_make_decoder(None)).extract(_make_document(), DocumentType.CONTROL_SHEET)
        assert result.status is StageStatus.EMPTY
        assert result.payload is None

    def test_unusable_qr_is_empty(self) -> None:
        result = QrExtractor(_make_decoder("https://example.com")).extract(
            _make_document(), DocumentType.TRANSACTION_OUTCOME
        )
        assert result.status is StageStatus.EMPTY

    def test_try_decode_and_parse_delegate(self) -> None:
        decoder = _make_decoder("Modulo: 1")
        extractor = QrExtractor(decoder)
        document = _make_document()
        assert extractor.try_decode(document) == "Modulo: 1"
        decoder.decode.assert_called_once_with(document)
        assert extractor.parse("Modulo: 1", DocumentType.TRANSACTION_INCOME) is not None


class TestNullQrDecoder:
    def test_always_none(self) -> None:
        assert NullQrDecoder().decode(_make_document()) is None


class TestOpenCvQrDecoder:
    def test_non_image_is_skipped(self) -> None:
        document = ProcessedDocument(content=b"%PDF", mime_type="application/pdf")
        assert OpenCvQrDecoder().decode(document) is None

    def test_undecodable_bytes_return_none(self) -> None:
        assert OpenCvQrDecoder().decode(ProcessedDocument(content=b"garbage")) is None

    def test_image_without_qr_returns_none(self, png_bytes: bytes) -> None:
        assert OpenCvQrDecoder().decode(ProcessedDocument(content=png_bytes, mime_type="image/png")) is None


class TestQrDecoderFactory:
    def test_creates_configured_decoder(self) -> None:
        assert isinstance(QrDecoderFactory.create(Settings(qr_engine="opencv")), OpenCvQrDecoder)
        assert isinstance(QrDecoderFactory.create(Settings(qr_engine="none")), NullQrDecoder)

    def test_unknown_engine_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown QR engine 'zbar'"):
            QrDecoderFactory.create(Settings(qr_engine="zbar"))
