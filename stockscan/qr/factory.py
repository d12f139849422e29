from stockscan.config.settings import Settings
from stockscan.qr.base import BaseQrDecoder, NullQrDecoder
from stockscan.qr.opencv_decoder import OpenCvQrDecoder


class QrDecoderFactory:
    """Creates the correct QR decoder based on settings."""

    ADAPTERS: dict[str, type[BaseQrDecoder]] = {
        "opencv": OpenCvQrDecoder,
        "none": NullQrDecoder,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseQrDecoder:
        engine = settings.qr_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown QR engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
