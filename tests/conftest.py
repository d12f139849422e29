import io

import pytest
from PIL import Image


def _image_bytes(fmt: str, size: tuple[int, int] = (64, 48), color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    """Small blank PNG image."""
    return _image_bytes("PNG")


@pytest.fixture()
def jpeg_bytes() -> bytes:
    """Small blank JPEG image."""
    return _image_bytes("JPEG")


@pytest.fixture()
def large_png_bytes() -> bytes:
    """PNG larger than the default preprocessing max edge."""
    return _image_bytes("PNG", size=(2400, 1200), color="gray")
