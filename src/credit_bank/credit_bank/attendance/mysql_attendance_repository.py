from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_RECORD_COLUMNS = "record_id, student_id, class_id, session_id, recorded_by, attendance_date, scanned_at, status"


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(row["record_id"]),
        student_id=int(row["student_id"]),
        class_id=row["class_id"],
        session_id=int(row["session_id"]),
        recorded_by=int(row["recorded_by"]),
        attendance_date=row["attendance_date"],
        scanned_at=row["scanned_at"],
        status=AttendanceStatus(row["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_class_and_date(
        self, *, student_id: int, class_id: str, attendance_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND class_id=%s AND attendance_date=%s
                """,
                (student_id, class_id, attendance_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

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
        with db_cursor(self._conn_factory, duplicate_message="Attendance already marked for this class today") as cur:
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, class_id, session_id, recorded_by, attendance_date, scanned_at, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (student_id, class_id, session_id, recorded_by, attendance_date, scanned_at, status.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE record_id=%s", (record_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_for_class(self, class_id: str, *, attendance_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        clauses = ["class_id=%s"]
        params: list[object] = [class_id]
        if attendance_date is not None:
            clauses.append("attendance_date=%s")
            params.append(attendance_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY scanned_at DESC, record_id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY scanned_at DESC, record_id DESC
                """,
                (student_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_status(self) -> dict[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("SELECT status, COUNT(*) AS total FROM attendance_records GROUP BY status")
            counts = {status: 0 for status in AttendanceStatus}
            for r in fetchall(cur):
                counts[AttendanceStatus(r["status"])] = int(r["total"])
            return counts
