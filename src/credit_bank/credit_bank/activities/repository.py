from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import ActivityStatus
from .model import Activity


class ActivityRepository(Protocol):
    def create_activity(self, activity: Activity) -> int:
        """Insert ``activity`` (its ``activity_id`` is ignored); returns the new id."""

        raise NotImplementedError

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[Activity]:
        """Newest first."""

        raise NotImplementedError

    def list_by_status(self, status: ActivityStatus) -> Sequence[Activity]:
        """Newest first."""

        raise NotImplementedError

    def update_activity(self, activity_id: int, *, fields: Mapping[str, Any], updated_at: datetime) -> bool:
        raise NotImplementedError

    def delete_activity(self, activity_id: int) -> bool:
        raise NotImplementedError

    def set_verification(
        self,
        activity_id: int,
        *,
        status: ActivityStatus,
        verified_by: int,
        verified_at: datetime,
        rejection_reason: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def count_by_status(self, *, student_id: Optional[int] = None) -> dict[ActivityStatus, int]:
        raise NotImplementedError
