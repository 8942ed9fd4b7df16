from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActivityCategory, ActivityStatus, ActivityType


@dataclass(frozen=True)
class Activity:
    """Domain entity: an extra-curricular activity a student submits for credit.

    Faculty review moves it out of PENDING; after that the student can no
    longer edit or delete it.
    """

    activity_id: int
    student_id: int
    title: str
    description: str
    type: ActivityType
    category: ActivityCategory
    organization: str
    created_at: datetime
    status: ActivityStatus = ActivityStatus.PENDING
    skills: tuple[str, ...] = ()
    duration: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_editable(self) -> bool:
        return self.status == ActivityStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "student_id": self.student_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "category": self.category.value,
            "organization": self.organization,
            "status": self.status.value,
            "skills": list(self.skills),
            "duration": self.duration,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "verified_by": self.verified_by,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
