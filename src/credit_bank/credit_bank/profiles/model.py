from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class StudentProfile:
    """Academic record attached to a student account (one per user)."""

    user_id: int
    abc_id: str
    roll_number: str
    enrollment_number: str
    course: str
    branch: str
    semester: int
    year: int
    first_name: str
    last_name: str
    phone: str
    date_of_birth: Optional[date] = None
    bio: str = ""
    cgpa: float = 0.0
    total_credits: int = 0
    completed_credits: int = 0
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "abc_id": self.abc_id,
            "roll_number": self.roll_number,
            "enrollment_number": self.enrollment_number,
            "course": self.course,
            "branch": self.branch,
            "semester": self.semester,
            "year": self.year,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone": self.phone,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "bio": self.bio,
            "cgpa": self.cgpa,
            "total_credits": self.total_credits,
            "completed_credits": self.completed_credits,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class FacultyProfile:
    user_id: int
    employee_id: str
    department: str
    designation: str
    first_name: str
    last_name: str
    phone: str
    experience_years: int = 0
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "employee_id": self.employee_id,
            "department": self.department,
            "designation": self.designation,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "phone": self.phone,
            "experience_years": self.experience_years,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
