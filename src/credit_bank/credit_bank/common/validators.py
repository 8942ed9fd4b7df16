from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str, *, max_len: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    value = value.strip()
    if max_len is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def optional_text(value, field_name: str, *, max_len: int) -> Optional[str]:
    """Blank or missing -> None, otherwise a trimmed string."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_non_empty(value, field_name, max_len=max_len)


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_positive_int(value, field_name: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer")
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a positive integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def require_int_between(value, field_name: str, low: int, high: int) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    number = _as_int(value, field_name)
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def _as_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a whole number")
    return number


def require_number_between(value, field_name: str, low: float, high: float) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return number


def require_choice(value, enum_cls: type[E], field_name: str) -> E:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_email(value: str, *, max_len: Optional[int] = None) -> str:
    email = require_non_empty(value, "Email", max_len=max_len).lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or "." not in domain:
        raise ValidationError("Email is not valid")
    return email
