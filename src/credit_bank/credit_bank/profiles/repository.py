from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import FacultyProfile, StudentProfile


class ProfileRepository(Protocol):
    """Student and faculty profiles, keyed by the owning ``user_id``.

    ``create_*``/``update_*`` raise DuplicateError when a unique identifier
    (ABC id, roll/enrollment number, employee id) belongs to another profile.
    """

    def get_student(self, user_id: int) -> Optional[StudentProfile]:
        raise NotImplementedError

    def list_students(self) -> Sequence[StudentProfile]:
        raise NotImplementedError

    def create_student(self, profile: StudentProfile) -> None:
        raise NotImplementedError

    def update_student(self, profile: StudentProfile) -> bool:
        raise NotImplementedError

    def get_faculty(self, user_id: int) -> Optional[FacultyProfile]:
        raise NotImplementedError

    def list_faculty(self) -> Sequence[FacultyProfile]:
        raise NotImplementedError

    def create_faculty(self, profile: FacultyProfile) -> None:
        raise NotImplementedError

    def update_faculty(self, profile: FacultyProfile) -> bool:
        raise NotImplementedError
