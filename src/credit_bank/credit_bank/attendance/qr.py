from __future__ import annotations

import io
import json

import qrcode

from ..core.exceptions import ValidationError
from .model import AttendanceSession


def build_qr_payload(session: AttendanceSession) -> str:
    """Text encoded into the QR image that students scan."""

    return json.dumps({"token": session.token, "class_id": session.class_id}, separators=(",", ":"))


def parse_qr_payload(text: str) -> tuple[str, str]:
    """Inverse of :func:`build_qr_payload`; returns ``(token, class_id)``."""

    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise ValidationError("QR data is not valid")
    if not isinstance(data, dict):
        raise ValidationError("QR data is not valid")

    token = data.get("token")
    class_id = data.get("class_id")
    if not isinstance(token, str) or not isinstance(class_id, str) or not token or not class_id:
        raise ValidationError("QR data is missing token or class id")
    return token, class_id


def render_qr_png(text: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
