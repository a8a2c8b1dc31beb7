from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from src.absensi.absensi.common.imgutil import normalize_base64, strip_data_url
from src.absensi.absensi.core.exceptions import InvalidImage


def png_base64(width: int, height: int) -> str:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (200, 30, 30, 255)).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def decode(b64: str) -> Image.Image:
    return Image.open(io.BytesIO(base64.b64decode(b64)))


def test_strip_data_url():
    assert strip_data_url("data:image/png;base64,AAAA") == "AAAA"
    assert strip_data_url("AAAA") == "AAAA"


def test_large_image_is_bounded_and_reencoded_as_jpeg():
    out = normalize_base64("data:image/png;base64," + png_base64(2000, 1000))
    img = decode(out)
    assert img.format == "JPEG"
    assert img.size == (1080, 540)


def test_small_image_keeps_its_size():
    img = decode(normalize_base64(png_base64(64, 48)))
    assert img.format == "JPEG"
    assert img.size == (64, 48)


def test_invalid_base64_is_rejected():
    with pytest.raises(InvalidImage):
        normalize_base64("not base64!!")


def test_non_image_payload_is_rejected():
    with pytest.raises(InvalidImage):
        normalize_base64(base64.b64encode(b"hello world").decode("ascii"))
