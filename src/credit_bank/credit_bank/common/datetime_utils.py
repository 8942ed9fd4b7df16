from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_optional_date(value: str | None) -> date | None:
    if not value:
        return None
    return parse_iso_date(value)


def now_local() -> datetime:
    """Current local time.

    Wrapped so tests can monkeypatch the clock.
    """
    return datetime.now()
