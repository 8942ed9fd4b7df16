from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSession


class SessionRepository(Protocol):
    def create_session(
        self,
        *,
        owner_id: int,
        class_id: str,
        token: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def increment_scan_count(self, session_id: int) -> bool:
        """Store-side ``scan_count = scan_count + 1``."""

        raise NotImplementedError

    def deactivate(self, session_id: int) -> bool:
        raise NotImplementedError

    def list_recent_for_owner(self, owner_id: int, limit: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def count_sessions(self, *, active_at: Optional[datetime] = None) -> int:
        """All sessions, or only those scannable at ``active_at``."""

        raise NotImplementedError


class AttendanceRepository(Protocol):
    def get_for_student_class_and_date(
        self, *, student_id: int, class_id: str, attendance_date: date
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        student_id: int,
        class_id: str,
        session_id: int,
        recorded_by: int,
        attendance_date: date,
        scanned_at: datetime,
        status: AttendanceStatus,
    ) -> int:
        """Insert a record; raises DuplicateError on the (student, class, day) key."""

        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class(self, class_id: str, *, attendance_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_status(self) -> dict[AttendanceStatus, int]:
        raise NotImplementedError
