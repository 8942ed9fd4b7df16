from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.credit_bank.credit_bank.activities.model import Activity
from src.credit_bank.credit_bank.activities.service import ActivityService
from src.credit_bank.credit_bank.attendance.model import AttendanceRecord, AttendanceSession
from src.credit_bank.credit_bank.attendance.service import AttendanceService, SessionService
from src.credit_bank.credit_bank.container import build_services
from src.credit_bank.credit_bank.core.enums import ActivityStatus, AttendanceStatus, Role
from src.credit_bank.credit_bank.core.exceptions import DuplicateError
from src.credit_bank.credit_bank.profiles.model import FacultyProfile, StudentProfile
from src.credit_bank.credit_bank.profiles.service import ProfileService
from src.credit_bank.credit_bank.users.model import User

T0 = datetime(2026, 3, 2, 9, 0, 0)


class InMemoryUsers:
    def __init__(self):
        self._by_id: dict[int, User] = {}
        self._next_id = 1

    def add(self, *, email: str, password: str, role: Role, display_name: str = "", is_active: bool = True) -> User:
        user = User(
            user_id=self._next_id,
            email=email,
            display_name=display_name or email.split("@")[0],
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
            created_at=T0,
        )
        self._by_id[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def create_user(self, *, email, display_name, password_hash, role) -> int:
        if self.get_by_email(email):
            raise DuplicateError("An account with this email already exists")
        user = User(
            user_id=self._next_id,
            email=email,
            display_name=display_name,
            password_hash=password_hash,
            role=role,
            created_at=T0,
        )
        self._by_id[user.user_id] = user
        self._next_id += 1
        return user.user_id

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        user = self._by_id.get(user_id)
        if not user:
            return False
        self._by_id[user_id] = replace(user, is_active=is_active)
        return True

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: u.user_id, reverse=True)

    def count_by_role(self) -> dict[Role, int]:
        counts = {role: 0 for role in Role}
        for u in self._by_id.values():
            counts[u.role] += 1
        return counts


class InMemorySessions:
    def __init__(self):
        self._by_id: dict[int, AttendanceSession] = {}
        self._next_id = 1

    def create_session(self, *, owner_id, class_id, token, created_at, expires_at) -> int:
        if self.get_by_token(token):
            raise DuplicateError("Session token collision")
        session = AttendanceSession(
            session_id=self._next_id,
            owner_id=owner_id,
            class_id=class_id,
            token=token,
            created_at=created_at,
            expires_at=expires_at,
        )
        self._by_id[session.session_id] = session
        self._next_id += 1
        return session.session_id

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        return self._by_id.get(session_id)

    def get_by_token(self, token: str) -> Optional[AttendanceSession]:
        return next((s for s in self._by_id.values() if s.token == token), None)

    def increment_scan_count(self, session_id: int) -> bool:
        s = self._by_id.get(session_id)
        if not s:
            return False
        self._by_id[session_id] = replace(s, scan_count=s.scan_count + 1)
        return True

    def deactivate(self, session_id: int) -> bool:
        s = self._by_id.get(session_id)
        if not s:
            return False
        self._by_id[session_id] = replace(s, is_active=False)
        return True

    def list_recent_for_owner(self, owner_id: int, limit: int):
        items = [s for s in self._by_id.values() if s.owner_id == owner_id]
        items.sort(key=lambda s: (s.created_at, s.session_id), reverse=True)
        return items[:limit]

    def count_sessions(self, *, active_at: Optional[datetime] = None) -> int:
        if active_at is None:
            return len(self._by_id)
        return sum(1 for s in self._by_id.values() if s.is_scannable(active_at))


class InMemoryAttendance:
    """Enforces the (student, class, day) unique key like the MySQL table does."""

    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def get_for_student_class_and_date(self, *, student_id, class_id, attendance_date) -> Optional[AttendanceRecord]:
        return next(
            (
                r for r in self._by_id.values()
                if (r.student_id, r.class_id, r.attendance_date) == (student_id, class_id, attendance_date)
            ),
            None,
        )

    def create_record(self, *, student_id, class_id, session_id, recorded_by, attendance_date, scanned_at, status) -> int:
        if self.get_for_student_class_and_date(
            student_id=student_id, class_id=class_id, attendance_date=attendance_date
        ):
            raise DuplicateError("Attendance already marked for this class today")
        record = AttendanceRecord(
            record_id=self._next_id,
            student_id=student_id,
            class_id=class_id,
            session_id=session_id,
            recorded_by=recorded_by,
            attendance_date=attendance_date,
            scanned_at=scanned_at,
            status=AttendanceStatus(status),
        )
        self._by_id[record.record_id] = record
        self._next_id += 1
        return record.record_id

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(record_id)

    def list_for_class(self, class_id: str, *, attendance_date: Optional[date] = None):
        items = [
            r for r in self._by_id.values()
            if r.class_id == class_id and (attendance_date is None or r.attendance_date == attendance_date)
        ]
        items.sort(key=lambda r: (r.scanned_at, r.record_id), reverse=True)
        return items

    def list_for_student(self, student_id: int):
        items = [r for r in self._by_id.values() if r.student_id == student_id]
        items.sort(key=lambda r: (r.scanned_at, r.record_id), reverse=True)
        return items

    def count_by_status(self) -> dict[AttendanceStatus, int]:
        counts = {status: 0 for status in AttendanceStatus}
        for r in self._by_id.values():
            counts[r.status] += 1
        return counts


class InMemoryProfiles:
    """Enforces the unique identifier columns of the profile tables."""

    def __init__(self):
        self._students: dict[int, StudentProfile] = {}
        self._faculty: dict[int, FacultyProfile] = {}

    def _check_student_unique(self, profile: StudentProfile) -> None:
        for other in self._students.values():
            if other.user_id == profile.user_id:
                continue
            if (
                other.abc_id == profile.abc_id
                or other.roll_number == profile.roll_number
                or other.enrollment_number == profile.enrollment_number
            ):
                raise DuplicateError("ABC id, roll number or enrollment number already belongs to another student")

    def get_student(self, user_id: int) -> Optional[StudentProfile]:
        return self._students.get(user_id)

    def list_students(self):
        return sorted(self._students.values(), key=lambda p: p.roll_number)

    def create_student(self, profile: StudentProfile) -> None:
        if profile.user_id in self._students:
            raise DuplicateError("Student profile already exists")
        self._check_student_unique(profile)
        self._students[profile.user_id] = replace(profile, updated_at=T0)

    def update_student(self, profile: StudentProfile) -> bool:
        if profile.user_id not in self._students:
            return False
        self._check_student_unique(profile)
        self._students[profile.user_id] = replace(profile, updated_at=T0)
        return True

    def get_faculty(self, user_id: int) -> Optional[FacultyProfile]:
        return self._faculty.get(user_id)

    def list_faculty(self):
        return sorted(self._faculty.values(), key=lambda p: (p.department, p.last_name, p.first_name))

    def create_faculty(self, profile: FacultyProfile) -> None:
        if profile.user_id in self._faculty or any(
            p.employee_id == profile.employee_id for p in self._faculty.values()
        ):
            raise DuplicateError("Employee id already belongs to another faculty member")
        self._faculty[profile.user_id] = replace(profile, updated_at=T0)

    def update_faculty(self, profile: FacultyProfile) -> bool:
        if profile.user_id not in self._faculty:
            return False
        if any(p.employee_id == profile.employee_id and p.user_id != profile.user_id for p in self._faculty.values()):
            raise DuplicateError("Employee id already belongs to another faculty member")
        self._faculty[profile.user_id] = replace(profile, updated_at=T0)
        return True


class InMemoryActivities:
    def __init__(self):
        self._by_id: dict[int, Activity] = {}
        self._next_id = 1

    def create_activity(self, activity: Activity) -> int:
        stored = replace(activity, activity_id=self._next_id)
        self._by_id[stored.activity_id] = stored
        self._next_id += 1
        return stored.activity_id

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        return self._by_id.get(activity_id)

    def _newest_first(self, items):
        return sorted(items, key=lambda a: (a.created_at, a.activity_id), reverse=True)

    def list_for_student(self, student_id: int):
        return self._newest_first(a for a in self._by_id.values() if a.student_id == student_id)

    def list_by_status(self, status: ActivityStatus):
        return self._newest_first(a for a in self._by_id.values() if a.status == status)

    def update_activity(self, activity_id: int, *, fields, updated_at) -> bool:
        a = self._by_id.get(activity_id)
        if not a:
            return False
        self._by_id[activity_id] = replace(a, updated_at=updated_at, **fields)
        return True

    def delete_activity(self, activity_id: int) -> bool:
        return self._by_id.pop(activity_id, None) is not None

    def set_verification(self, activity_id: int, *, status, verified_by, verified_at, rejection_reason) -> bool:
        a = self._by_id.get(activity_id)
        if not a:
            return False
        self._by_id[activity_id] = replace(
            a,
            status=status,
            verified_by=verified_by,
            verified_at=verified_at,
            rejection_reason=rejection_reason,
            updated_at=verified_at,
        )
        return True

    def count_by_status(self, *, student_id: Optional[int] = None) -> dict[ActivityStatus, int]:
        counts = {status: 0 for status in ActivityStatus}
        for a in self._by_id.values():
            if student_id is None or a.student_id == student_id:
                counts[a.status] += 1
        return counts


@pytest.fixture
def fixed_now() -> datetime:
    return T0


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def profiles_repo() -> InMemoryProfiles:
    return InMemoryProfiles()


@pytest.fixture
def activities_repo() -> InMemoryActivities:
    return InMemoryActivities()


@pytest.fixture
def session_service(sessions_repo) -> SessionService:
    return SessionService(sessions_repo)


@pytest.fixture
def attendance_service(attendance_repo, session_service) -> AttendanceService:
    return AttendanceService(attendance_repo, session_service)


@pytest.fixture
def profile_service(profiles_repo, users_repo) -> ProfileService:
    return ProfileService(profiles_repo, users_repo)


@pytest.fixture
def activity_service(activities_repo) -> ActivityService:
    return ActivityService(activities_repo)


@pytest.fixture
def container(users_repo, sessions_repo, attendance_repo, profiles_repo, activities_repo):
    return build_services(
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        profiles_repo=profiles_repo,
        activities_repo=activities_repo,
        jwt_secret="test-jwt-secret",
    )
