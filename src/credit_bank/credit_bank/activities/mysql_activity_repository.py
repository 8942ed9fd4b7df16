from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import ActivityCategory, ActivityStatus, ActivityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Activity
from .repository import ActivityRepository

_ACTIVITY_COLUMNS = (
    "activity_id, student_id, title, description, type, category, organization, status, skills, duration, "
    "start_date, end_date, verified_by, verified_at, rejection_reason, created_at, updated_at"
)
_EDITABLE_COLUMNS = {
    "title", "description", "type", "category", "organization", "skills", "duration", "start_date", "end_date",
}


def _split_skills(value: Optional[str]) -> tuple[str, ...]:
    return tuple(s for s in (value or "").split(",") if s)


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return ",".join(value)
    return value


def _to_activity(row: dict) -> Activity:
    return Activity(
        activity_id=int(row["activity_id"]),
        student_id=int(row["student_id"]),
        title=row["title"],
        description=row["description"],
        type=ActivityType(row["type"]),
        category=ActivityCategory(row["category"]),
        organization=row["organization"],
        status=ActivityStatus(row["status"]),
        skills=_split_skills(row.get("skills")),
        duration=row.get("duration"),
        start_date=row.get("start_date"),
        end_date=row.get("end_date"),
        verified_by=int(row["verified_by"]) if row.get("verified_by") is not None else None,
        verified_at=row.get("verified_at"),
        rejection_reason=row.get("rejection_reason"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at"),
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_activity(self, activity: Activity) -> int:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                INSERT INTO activities(student_id, title, description, type, category, organization, status,
                                       skills, duration, start_date, end_date, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    activity.student_id,
                    activity.title,
                    activity.description,
                    activity.type.value,
                    activity.category.value,
                    activity.organization,
                    activity.status.value,
                    _column_value(activity.skills),
                    activity.duration,
                    activity.start_date,
                    activity.end_date,
                    activity.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT {_ACTIVITY_COLUMNS} FROM activities WHERE activity_id=%s", (activity_id,))
            row = fetchone(cur)
            return _to_activity(row) if row else None

    def list_for_student(self, student_id: int) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_ACTIVITY_COLUMNS}
                FROM activities
                WHERE student_id=%s
                ORDER BY created_at DESC, activity_id DESC
                """,
                (student_id,),
            )
            return [_to_activity(r) for r in fetchall(cur)]

    def list_by_status(self, status: ActivityStatus) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_ACTIVITY_COLUMNS}
                FROM activities
                WHERE status=%s
                ORDER BY created_at DESC, activity_id DESC
                """,
                (status.value,),
            )
            return [_to_activity(r) for r in fetchall(cur)]

    def update_activity(self, activity_id: int, *, fields: Mapping[str, Any], updated_at: datetime) -> bool:
        unknown = set(fields) - _EDITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not an editable activity column: {', '.join(sorted(unknown))}")

        columns = sorted(fields)
        assignments = ", ".join(f"{c}=%s" for c in columns + ["updated_at"])
        params = [_column_value(fields[c]) for c in columns] + [updated_at, activity_id]
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"UPDATE activities SET {assignments} WHERE activity_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete_activity(self, activity_id: int) -> bool:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("DELETE FROM activities WHERE activity_id=%s", (activity_id,))
            return cur.rowcount > 0

    def set_verification(
        self,
        activity_id: int,
        *,
        status: ActivityStatus,
        verified_by: int,
        verified_at: datetime,
        rejection_reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                UPDATE activities
                SET status=%s, verified_by=%s, verified_at=%s, rejection_reason=%s, updated_at=%s
                WHERE activity_id=%s
                """,
                (status.value, verified_by, verified_at, rejection_reason, verified_at, activity_id),
            )
            return cur.rowcount > 0

    def count_by_status(self, *, student_id: Optional[int] = None) -> dict[ActivityStatus, int]:
        where, params = ("WHERE student_id=%s", (student_id,)) if student_id is not None else ("", ())
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT status, COUNT(*) AS total FROM activities {where} GROUP BY status", params)
            counts = {status: 0 for status in ActivityStatus}
            for r in fetchall(cur):
                counts[ActivityStatus(r["status"])] = int(r["total"])
            return counts
