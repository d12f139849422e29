import os
from collections.abc import Callable, Generator
from typing import Any

import cv2
import numpy as np
import psycopg
import pytest

from stockscan.cache.postgres_cache import PostgresAnalysisCache
from stockscan.config.settings import Settings
from stockscan.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "stockscan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        PostgresAnalysisCache().ensure_schema()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    hashes: list[str] = []
    yield hashes
    if not hashes:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for content_hash in hashes:
                cur.execute("DELETE FROM scan_audit WHERE content_hash = %s", (content_hash,))
                cur.execute("DELETE FROM scan_cache WHERE content_hash = %s", (content_hash,))
        conn.commit()


def encode_qr_png(text: str, scale: int = 8, border: int = 4) -> bytes:
    """Render text as a QR code PNG large enough for the detector."""
    if not hasattr(cv2, "QRCodeEncoder"):
        pytest.skip("OpenCV build has no QRCodeEncoder")
    modules = cv2.QRCodeEncoder.create().encode(text)
    image = cv2.resize(
        modules,
        (modules.shape[1] * scale, modules.shape[0] * scale),
        interpolation=cv2.INTER_NEAREST,
    )
    image = cv2.copyMakeBorder(
        image, border * scale, border * scale, border * scale, border * scale,
        cv2.BORDER_CONSTANT, value=255,
    )
    ok, buf = cv2.imencode(".png", np.ascontiguousarray(image))
    assert ok
    return buf.tobytes()


@pytest.fixture
def qr_png() -> Callable[[str], bytes]:
    return encode_qr_png
