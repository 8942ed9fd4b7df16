from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: a time-boxed scannable window for one class meeting.

    Expiry is lazy: nothing flips ``is_active`` when ``expires_at`` passes,
    readers call :meth:`is_scannable` instead.
    """

    session_id: int
    owner_id: int
    class_id: str
    token: str
    created_at: datetime
    expires_at: datetime
    is_active: bool = True
    scan_count: int = 0

    def is_scannable(self, now: datetime) -> bool:
        return self.is_active and now < self.expires_at

    def to_dict(self, *, now: datetime | None = None, include_token: bool = True) -> dict:
        data = {
            "session_id": self.session_id,
            "owner_id": self.owner_id,
            "class_id": self.class_id,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "is_active": self.is_active,
            "scan_count": self.scan_count,
        }
        if include_token:
            data["token"] = self.token
        if now is not None:
            data["is_scannable"] = self.is_scannable(now)
        return data


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for a class on a calendar day."""

    record_id: int
    student_id: int
    class_id: str
    session_id: int
    recorded_by: int
    attendance_date: date
    scanned_at: datetime
    status: AttendanceStatus

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "student_id": self.student_id,
            "class_id": self.class_id,
            "session_id": self.session_id,
            "recorded_by": self.recorded_by,
            "attendance_date": self.attendance_date.isoformat(),
            "scanned_at": self.scanned_at.isoformat(),
            "status": self.status.value,
        }
