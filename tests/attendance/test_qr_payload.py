from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.credit_bank.credit_bank.attendance.model import AttendanceSession
from src.credit_bank.credit_bank.attendance.qr import build_qr_payload, parse_qr_payload, render_qr_png
from src.credit_bank.credit_bank.core.exceptions import ValidationError


def _session() -> AttendanceSession:
    created = datetime(2026, 3, 2, 9, 0)
    return AttendanceSession(
        session_id=1,
        owner_id=7,
        class_id="CS101",
        token="abc-123_XYZ",
        created_at=created,
        expires_at=created + timedelta(minutes=30),
    )


def test_payload_carries_token_and_class():
    assert parse_qr_payload(build_qr_payload(_session())) == ("abc-123_XYZ", "CS101")


@pytest.mark.parametrize("text", ["", "not json", "[1, 2]", '{"token": "x"}', '{"token": "", "class_id": "CS101"}'])
def test_malformed_payload(text):
    with pytest.raises(ValidationError):
        parse_qr_payload(text)


def test_render_png():
    png = render_qr_png(build_qr_payload(_session()))
    assert png.startswith(b"\x89PNG\r\n\x1a\n")
