import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M


def render_token_png(token: str, box_size: int = 8, border: int = 4) -> bytes:
    """PNG of the QR code shown on the guest's phone and scanned at the restaurant."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(token)
    qr.make(fit=True)
    img = qr.make_image()
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()
