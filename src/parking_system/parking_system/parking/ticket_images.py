from __future__ import annotations

import io
from typing import Optional

import qrcode
from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.exceptions import ValidationError
from .tickets import ticket_token


def ticket_qr_png(record_id: int) -> bytes:
    """PNG QR code for a record's ticket token."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(ticket_token(record_id))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_ticket_image(data: bytes) -> Optional[str]:
    """Return the first QR payload found in an uploaded photo, if any."""
    try:
        img = Image.open(io.BytesIO(data)).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("File is not a valid image")

    decoded = pyzbar_decode(img)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip()
