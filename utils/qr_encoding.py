"""QR rendering.

Uses the ``qrcode`` library with the Pillow image factory. Error correction
and module size are display choices; decoders only care that the payload
round-trips exactly.
"""

from __future__ import annotations

import base64
import io

import qrcode
from qrcode.exceptions import DataOverflowError

from api.services.exceptions import EncodingError


def encode_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    """Render ``data`` as a PNG QR code and return the image bytes.

    Raises:
        EncodingError: if ``data`` does not fit in the largest QR version.
    """

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
    # Newer qrcode releases report overflow as ValueError("Invalid version ...").
    except (DataOverflowError, ValueError) as exc:
        raise EncodingError(
            f"QR payload of {len(data)} characters exceeds symbol capacity"
        ) from exc

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def encode_data_uri(data: str) -> str:
    """Render ``data`` as a QR code wrapped in a ``data:image/png;base64`` URI."""

    b64 = base64.b64encode(encode_png(data)).decode("ascii")
    return f"data:image/png;base64,{b64}"
