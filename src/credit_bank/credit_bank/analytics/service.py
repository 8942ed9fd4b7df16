from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..activities.repository import ActivityRepository
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository, SessionRepository
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_RECENT_RECORDS
from ..core.enums import ActivityStatus, AttendanceStatus
from ..core.exceptions import NotFoundError
from ..users.repository import UserRepository

REPORT_FIELDS = [
    "attendance_date",
    "class_id",
    "student_id",
    "status",
    "scanned_at",
    "session_id",
    "recorded_by",
]


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    late: int

    @property
    def attendance_rate(self) -> float:
        """Present share of all records, in percent, 0 when there are none."""

        if not self.total:
            return 0.0
        return round(self.present / self.total * 100, 2)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "attendance_rate": self.attendance_rate,
        }


def stats_from_counts(counts: dict[AttendanceStatus, int]) -> AttendanceStats:
    return AttendanceStats(
        total=sum(counts.values()),
        present=counts.get(AttendanceStatus.PRESENT, 0),
        absent=counts.get(AttendanceStatus.ABSENT, 0),
        late=counts.get(AttendanceStatus.LATE, 0),
    )


def activity_stats(counts: dict[ActivityStatus, int]) -> dict:
    data = {"total": sum(counts.values())}
    data.update({status.value: counts.get(status, 0) for status in ActivityStatus})
    return data


def stats_from_records(records: Sequence[AttendanceRecord]) -> AttendanceStats:
    counts = {status: 0 for status in AttendanceStatus}
    for r in records:
        counts[r.status] += 1
    return stats_from_counts(counts)


class AttendanceAnalyticsService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        users: UserRepository,
        activities: ActivityRepository,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._users = users
        self._activities = activities

    def class_summary(self, class_id: str, *, day: Optional[date] = None) -> dict:
        records = self._attendance.list_for_class(class_id, attendance_date=day)
        return {
            "class_id": class_id,
            "date": day.isoformat() if day else None,
            "attendance_stats": stats_from_records(records).to_dict(),
            "attendance_records": [r.to_dict() for r in records],
        }

    def student_summary(self, student_id: int, *, limit: int = DEFAULT_RECENT_RECORDS) -> dict:
        student = self._users.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")

        records = self._attendance.list_for_student(student.user_id)
        return {
            "student": student.to_public(),
            "attendance_stats": stats_from_records(records).to_dict(),
            "attendance_records": [r.to_dict() for r in records[:limit]],
            "activity_stats": activity_stats(self._activities.count_by_status(student_id=student.user_id)),
            "recent_activities": [a.to_dict() for a in self._activities.list_for_student(student.user_id)[:limit]],
        }

    def overview(self, *, now: datetime | None = None) -> dict:
        now = now or now_local()
        users_by_role = self._users.count_by_role()
        stats = stats_from_counts(self._attendance.count_by_status())

        return {
            "total_users": sum(users_by_role.values()),
            "users_by_role": {role.value: count for role, count in users_by_role.items()},
            "total_sessions": self._sessions.count_sessions(),
            "active_sessions": self._sessions.count_sessions(active_at=now),
            "total_attendance_records": stats.total,
            "attendance_stats": stats.to_dict(),
            "activity_stats": activity_stats(self._activities.count_by_status()),
        }

    def class_report_csv(self, class_id: str, *, day: Optional[date] = None) -> bytes:
        records = self._attendance.list_for_class(class_id, attendance_date=day)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for r in records:
            row = r.to_dict()
            writer.writerow({k: row[k] for k in REPORT_FIELDS})

        # BOM so spreadsheet apps detect UTF-8
        return out.getvalue().encode("utf-8-sig")
