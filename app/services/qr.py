"""QR code rendering for check-in tokens."""
import base64
import io

import qrcode
from qrcode.exceptions import DataOverflowError

from app.core.exceptions import QREncodingError


def _build_qr(data: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise QREncodingError(f"Payload too large for a QR code ({len(data)} chars)") from e
    return qr


def render_qr_data_url(data: str) -> str:
    """Render ``data`` as a PNG QR code and return it as a data URL.

    The string is encoded verbatim; its content is not inspected.

    Raises:
        QREncodingError: If the payload does not fit in a QR code
    """
    qr = _build_qr(data)
    img = qr.make_image(fill_color="#000000", back_color="#FFFFFF")

    buffer = io.BytesIO()
    img.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
