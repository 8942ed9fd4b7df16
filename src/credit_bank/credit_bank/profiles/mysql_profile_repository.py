from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FacultyProfile, StudentProfile
from .repository import ProfileRepository

# Writable columns, in insert order; user_id is the key and updated_at is set by MySQL.
_STUDENT_FIELDS = (
    "abc_id", "roll_number", "enrollment_number", "course", "branch", "semester", "year",
    "first_name", "last_name", "phone", "date_of_birth", "bio", "cgpa", "total_credits", "completed_credits",
)
_FACULTY_FIELDS = (
    "employee_id", "department", "designation", "first_name", "last_name", "phone", "experience_years",
)

_STUDENT_DUPLICATE = "ABC id, roll number or enrollment number already belongs to another student"
_FACULTY_DUPLICATE = "Employee id already belongs to another faculty member"


def _to_student(row: dict) -> StudentProfile:
    return StudentProfile(
        user_id=int(row["user_id"]),
        abc_id=row["abc_id"],
        roll_number=row["roll_number"],
        enrollment_number=row["enrollment_number"],
        course=row["course"],
        branch=row["branch"],
        semester=int(row["semester"]),
        year=int(row["year"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row["phone"],
        date_of_birth=row.get("date_of_birth"),
        bio=row.get("bio") or "",
        cgpa=float(row.get("cgpa") or 0),
        total_credits=int(row.get("total_credits") or 0),
        completed_credits=int(row.get("completed_credits") or 0),
        updated_at=row.get("updated_at"),
    )


def _to_faculty(row: dict) -> FacultyProfile:
    return FacultyProfile(
        user_id=int(row["user_id"]),
        employee_id=row["employee_id"],
        department=row["department"],
        designation=row["designation"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row["phone"],
        experience_years=int(row.get("experience_years") or 0),
        updated_at=row.get("updated_at"),
    )


def _insert_sql(table: str, fields: Sequence[str]) -> str:
    columns = ", ".join(("user_id",) + tuple(fields))
    placeholders = ", ".join(["%s"] * (len(fields) + 1))
    return f"INSERT INTO {table}({columns}) VALUES({placeholders})"


def _update_sql(table: str, fields: Sequence[str]) -> str:
    assignments = ", ".join(f"{f}=%s" for f in fields)
    return f"UPDATE {table} SET {assignments} WHERE user_id=%s"


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # ===== STUDENTS =====

    def get_student(self, user_id: int) -> Optional[StudentProfile]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("SELECT * FROM student_profiles WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_students(self) -> Sequence[StudentProfile]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("SELECT * FROM student_profiles ORDER BY roll_number")
            return [_to_student(r) for r in fetchall(cur)]

    def create_student(self, profile: StudentProfile) -> None:
        values = [getattr(profile, f) for f in _STUDENT_FIELDS]
        with db_cursor(self._conn_factory, duplicate_message=_STUDENT_DUPLICATE) as cur:
            cur.execute(_insert_sql("student_profiles", _STUDENT_FIELDS), (profile.user_id, *values))

    def update_student(self, profile: StudentProfile) -> bool:
        values = [getattr(profile, f) for f in _STUDENT_FIELDS]
        with db_cursor(self._conn_factory, duplicate_message=_STUDENT_DUPLICATE) as cur:
            cur.execute(_update_sql("student_profiles", _STUDENT_FIELDS), (*values, profile.user_id))
            return cur.rowcount > 0

    # ===== FACULTY =====

    def get_faculty(self, user_id: int) -> Optional[FacultyProfile]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("SELECT * FROM faculty_profiles WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_faculty(row) if row else None

    def list_faculty(self) -> Sequence[FacultyProfile]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("SELECT * FROM faculty_profiles ORDER BY department, last_name, first_name")
            return [_to_faculty(r) for r in fetchall(cur)]

    def create_faculty(self, profile: FacultyProfile) -> None:
        values = [getattr(profile, f) for f in _FACULTY_FIELDS]
        with db_cursor(self._conn_factory, duplicate_message=_FACULTY_DUPLICATE) as cur:
            cur.execute(_insert_sql("faculty_profiles", _FACULTY_FIELDS), (profile.user_id, *values))

    def update_faculty(self, profile: FacultyProfile) -> bool:
        values = [getattr(profile, f) for f in _FACULTY_FIELDS]
        with db_cursor(self._conn_factory, duplicate_message=_FACULTY_DUPLICATE) as cur:
            cur.execute(_update_sql("faculty_profiles", _FACULTY_FIELDS), (*values, profile.user_id))
            return cur.rowcount > 0
