from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Attendance status stored with each record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class ActivityType(str, Enum):
    CERTIFICATION = "certification"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    INTERNSHIP = "internship"
    RESEARCH = "research"
    VOLUNTEER = "volunteer"
    OTHER = "other"


class ActivityCategory(str, Enum):
    TECHNICAL = "technical"
    LEADERSHIP = "leadership"
    ACADEMIC = "academic"
    SPORTS = "sports"
    CULTURAL = "cultural"
    SOCIAL = "social"


class ActivityStatus(str, Enum):
    """Review state of a submitted activity; only PENDING ones are editable."""

    PENDING = "pending"
    IN_PROCESS = "in_process"
    APPROVED = "approved"
    REJECTED = "rejected"
