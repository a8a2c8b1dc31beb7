from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..core.constants import IMAGE_JPEG_QUALITY, IMAGE_MAX_SIDE
from ..core.exceptions import InvalidImage


def strip_data_url(payload: str) -> str:
    """Drop a `data:image/...;base64,` prefix if present."""
    head, sep, tail = payload.partition(",")
    if sep and "base64" in head:
        return tail
    return payload


def normalize_base64(payload: str, *, max_side: int = IMAGE_MAX_SIDE, quality: int = IMAGE_JPEG_QUALITY) -> str:
    """Decode a base64 image, bound its longest side and re-encode it as JPEG.

    Returns clean base64 (no data-URL prefix). Attachments are opaque to the
    services; this is the only place pixel data is touched.
    """
    try:
        raw = base64.b64decode(strip_data_url(payload.strip()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImage(f"decode base64: {exc}") from exc

    try:
        with Image.open(io.BytesIO(raw)) as src:
            img = src.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImage(f"decode image: {exc}") from exc

    if max(img.size) > max_side:
        img.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return base64.b64encode(buf.getvalue()).decode("ascii")
