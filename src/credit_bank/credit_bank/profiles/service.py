from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Callable, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    optional_text,
    require_int_between,
    require_non_empty,
    require_number_between,
)
from ..core.constants import MAX_NAME_LENGTH, MAX_SHORT_TEXT_LENGTH, MAX_TEXT_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import Identity
from ..users.repository import UserRepository
from .model import FacultyProfile, StudentProfile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)

Profile = Union[StudentProfile, FacultyProfile]

MAX_CODE_LENGTH = 50
_PHONE_RE = re.compile(r"^\+?[0-9][0-9 ()-]{5,19}$")

# Echoed back by clients that PUT a whole profile; never written.
READ_ONLY_FIELDS = {"user_id", "full_name", "updated_at"}


def _code(label: str) -> Callable:
    return lambda v: require_non_empty(v, label, max_len=MAX_CODE_LENGTH)


def _name(label: str) -> Callable:
    return lambda v: require_non_empty(v, label, max_len=MAX_NAME_LENGTH)


def _short(label: str) -> Callable:
    return lambda v: require_non_empty(v, label, max_len=MAX_SHORT_TEXT_LENGTH)


def _phone(value) -> str:
    phone = require_non_empty(value, "Phone", max_len=20)
    if not _PHONE_RE.match(phone):
        raise ValidationError("Phone is not valid")
    return phone


def _date_of_birth(value):
    if value in (None, ""):
        return None
    return parse_iso_date(value)


STUDENT_RULES: dict[str, Callable] = {
    "abc_id": _code("ABC id"),
    "roll_number": _code("Roll number"),
    "enrollment_number": _code("Enrollment number"),
    "course": _short("Course"),
    "branch": _short("Branch"),
    "semester": lambda v: require_int_between(v, "Semester", 1, 12),
    "year": lambda v: require_int_between(v, "Year", 1, 6),
    "first_name": _name("First name"),
    "last_name": _name("Last name"),
    "phone": _phone,
    "date_of_birth": _date_of_birth,
    "bio": lambda v: optional_text(v, "Bio", max_len=MAX_TEXT_LENGTH) or "",
    "cgpa": lambda v: round(require_number_between(v, "CGPA", 0, 10), 2),
    "total_credits": lambda v: require_int_between(v, "Total credits", 0, 1000),
    "completed_credits": lambda v: require_int_between(v, "Completed credits", 0, 1000),
}
STUDENT_REQUIRED = (
    "abc_id", "roll_number", "enrollment_number", "course", "branch",
    "semester", "year", "first_name", "last_name", "phone",
)
# Academic standing is maintained by admins only.
STUDENT_SELF_CREATE = set(STUDENT_RULES) - {"cgpa", "total_credits", "completed_credits"}
STUDENT_SELF_UPDATE = {"first_name", "last_name", "phone", "date_of_birth", "bio"}

FACULTY_RULES: dict[str, Callable] = {
    "employee_id": _code("Employee id"),
    "department": _short("Department"),
    "designation": _short("Designation"),
    "first_name": _name("First name"),
    "last_name": _name("Last name"),
    "phone": _phone,
    "experience_years": lambda v: require_int_between(v, "Experience (years)", 0, 60),
}
FACULTY_REQUIRED = ("employee_id", "department", "designation", "first_name", "last_name", "phone")
FACULTY_SELF_CREATE = set(FACULTY_RULES)
FACULTY_SELF_UPDATE = {"designation", "first_name", "last_name", "phone", "experience_years"}


def clean_profile_data(
    data: Mapping,
    *,
    rules: Mapping[str, Callable],
    allowed: set[str],
    required: Sequence[str] = (),
) -> dict:
    """Validate ``data`` against ``rules``; returns only the writable fields.

    Unknown fields are a ValidationError, known fields outside ``allowed``
    an AuthorizationError.
    """

    if not isinstance(data, Mapping):
        raise ValidationError("Profile must be a JSON object")

    keys = set(data) - READ_ONLY_FIELDS
    unknown = sorted(keys - set(rules))
    if unknown:
        raise ValidationError(f"Unknown profile field(s): {', '.join(unknown)}")
    forbidden = sorted(keys - allowed)
    if forbidden:
        raise AuthorizationError(f"Not allowed to change: {', '.join(forbidden)}")

    missing = [f for f in required if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    return {key: rules[key](data[key]) for key in sorted(keys)}


class ProfileService:
    """Student/faculty profile CRUD with the portal's ownership rules.

    - students see and edit only their own profile; faculty and admins see all
    - faculty edit only their own profile; admins edit any profile
    """

    def __init__(self, profiles: ProfileRepository, users: UserRepository):
        self._profiles = profiles
        self._users = users

    def profile_for(self, identity: Identity) -> Optional[Profile]:
        if identity.role == Role.STUDENT:
            return self._profiles.get_student(identity.user_id)
        if identity.role == Role.FACULTY:
            return self._profiles.get_faculty(identity.user_id)
        return None

    def check_new_profile(self, role: Role, data: Mapping) -> None:
        """Validate a profile submitted at registration, before the account exists."""

        if role == Role.STUDENT:
            clean_profile_data(data, rules=STUDENT_RULES, allowed=STUDENT_SELF_CREATE, required=STUDENT_REQUIRED)
        elif role == Role.FACULTY:
            clean_profile_data(data, rules=FACULTY_RULES, allowed=FACULTY_SELF_CREATE, required=FACULTY_REQUIRED)
        else:
            raise ValidationError("Only student and faculty accounts have profiles")

    def save_own(self, identity: Identity, data: Mapping) -> Profile:
        if identity.role == Role.STUDENT:
            return self.save_student(user_id=identity.user_id, requester=identity, data=data)
        if identity.role == Role.FACULTY:
            return self.save_faculty(user_id=identity.user_id, requester=identity, data=data)
        raise ValidationError("Only student and faculty accounts have profiles")

    # ===== STUDENTS =====

    def list_students(self, *, requester: Identity) -> Sequence[StudentProfile]:
        if requester.role not in (Role.ADMIN, Role.FACULTY):
            raise AuthorizationError("Insufficient permissions")
        return self._profiles.list_students()

    def get_student(self, *, user_id: int, requester: Identity) -> StudentProfile:
        if requester.role == Role.STUDENT and requester.user_id != int(user_id):
            raise AuthorizationError("Access denied")

        profile = self._profiles.get_student(int(user_id))
        if not profile:
            raise NotFoundError("Student not found")
        return profile

    def save_student(self, *, user_id: int, requester: Identity, data: Mapping) -> StudentProfile:
        """Create the profile on first save, update it afterwards."""

        user_id = int(user_id)
        is_admin = requester.role == Role.ADMIN
        if not is_admin and not (requester.role == Role.STUDENT and requester.user_id == user_id):
            raise AuthorizationError("Access denied")
        self._require_account(user_id, Role.STUDENT, "Student not found")

        existing = self._profiles.get_student(user_id)
        if existing is None:
            allowed = set(STUDENT_RULES) if is_admin else STUDENT_SELF_CREATE
            fields = clean_profile_data(data, rules=STUDENT_RULES, allowed=allowed, required=STUDENT_REQUIRED)
            self._profiles.create_student(StudentProfile(user_id=user_id, **fields))
            logger.info("Student profile created for user %s by %s", user_id, requester.user_id)
        else:
            allowed = set(STUDENT_RULES) if is_admin else STUDENT_SELF_UPDATE
            fields = clean_profile_data(data, rules=STUDENT_RULES, allowed=allowed)
            if fields:
                self._profiles.update_student(replace(existing, **fields))
                logger.info("Student profile %s updated by %s (%s)", user_id, requester.user_id, ", ".join(fields))

        return self._profiles.get_student(user_id)

    # ===== FACULTY =====

    def list_faculty(self, *, requester: Identity) -> Sequence[FacultyProfile]:
        if requester.role != Role.ADMIN:
            raise AuthorizationError("Insufficient permissions")
        return self._profiles.list_faculty()

    def get_faculty(self, *, user_id: int, requester: Identity) -> FacultyProfile:
        if requester.role == Role.FACULTY and requester.user_id != int(user_id):
            raise AuthorizationError("Access denied")

        profile = self._profiles.get_faculty(int(user_id))
        if not profile:
            raise NotFoundError("Faculty not found")
        return profile

    def save_faculty(self, *, user_id: int, requester: Identity, data: Mapping) -> FacultyProfile:
        user_id = int(user_id)
        is_admin = requester.role == Role.ADMIN
        if not is_admin and not (requester.role == Role.FACULTY and requester.user_id == user_id):
            raise AuthorizationError("Access denied")
        self._require_account(user_id, Role.FACULTY, "Faculty not found")

        existing = self._profiles.get_faculty(user_id)
        if existing is None:
            fields = clean_profile_data(
                data, rules=FACULTY_RULES, allowed=FACULTY_SELF_CREATE, required=FACULTY_REQUIRED
            )
            self._profiles.create_faculty(FacultyProfile(user_id=user_id, **fields))
            logger.info("Faculty profile created for user %s by %s", user_id, requester.user_id)
        else:
            allowed = set(FACULTY_RULES) if is_admin else FACULTY_SELF_UPDATE
            fields = clean_profile_data(data, rules=FACULTY_RULES, allowed=allowed)
            if fields:
                self._profiles.update_faculty(replace(existing, **fields))
                logger.info("Faculty profile %s updated by %s (%s)", user_id, requester.user_id, ", ".join(fields))

        return self._profiles.get_faculty(user_id)

    def _require_account(self, user_id: int, role: Role, message: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user or user.role != role:
            raise NotFoundError(message)
