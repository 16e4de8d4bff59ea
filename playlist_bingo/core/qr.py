from __future__ import annotations

from urllib.parse import urlencode

from PIL import Image
import qrcode


def join_url(base_url: str, game_code: str) -> str:
    """Link players follow to join a game by its code."""
    return f"{base_url.rstrip('/')}/join?{urlencode({'code': game_code})}"


def make_qr_image(data: str, *, box_size: int = 6, border: int = 2) -> Image.Image:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")
