from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from ..core.constants import MAX_IMAGE_BYTES
from ..core.exceptions import ValidationError


def normalize_image(data: bytes, *, max_bytes: int = MAX_IMAGE_BYTES, max_side: int = 1280) -> bytes:
    """Validate an uploaded photo and re-encode it as JPEG.

    Oversized uploads are rejected before decoding. Large frames are
    downscaled so the longest side is at most ``max_side`` pixels.
    """

    if not data:
        raise ValidationError("Empty image")
    if len(data) > max_bytes:
        raise ValidationError(f"Image must be smaller than {max_bytes // (1024 * 1024)}MB")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ValidationError("File is not a valid image")

    img = img.convert("RGB")
    img.thumbnail((max_side, max_side))

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=80)
    return buf.getvalue()
