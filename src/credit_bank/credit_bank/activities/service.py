from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.validators import optional_text, require_choice, require_non_empty
from ..core.constants import MAX_SHORT_TEXT_LENGTH, MAX_SKILLS_LENGTH, MAX_TEXT_LENGTH, MAX_TITLE_LENGTH
from ..core.enums import ActivityCategory, ActivityStatus, ActivityType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import Identity
from .model import Activity
from .repository import ActivityRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title", "description", "type", "category", "organization", "skills", "duration", "start_date", "end_date",
)
REQUIRED_FIELDS = ("title", "description", "type", "category", "organization")
REVIEW_OUTCOMES = (ActivityStatus.APPROVED, ActivityStatus.REJECTED, ActivityStatus.IN_PROCESS)


def parse_skills(value) -> tuple[str, ...]:
    """Accept a list of skills or one comma separated string."""

    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValidationError("Skills must be a list or a comma separated string")

    skills = []
    for item in items:
        if not isinstance(item, str):
            raise ValidationError("Skills must be text")
        item = item.strip()
        if item and item not in skills:
            skills.append(item)
    if len(",".join(skills)) > MAX_SKILLS_LENGTH:
        raise ValidationError(f"Skills must be at most {MAX_SKILLS_LENGTH} characters in total")
    return tuple(skills)


def _clean_field(name: str, value):
    if name == "title":
        return require_non_empty(value, "Title", max_len=MAX_TITLE_LENGTH)
    if name == "description":
        return require_non_empty(value, "Description", max_len=MAX_TEXT_LENGTH)
    if name == "organization":
        return require_non_empty(value, "Organization", max_len=MAX_TITLE_LENGTH)
    if name == "type":
        return require_choice(value, ActivityType, "Type")
    if name == "category":
        return require_choice(value, ActivityCategory, "Category")
    if name == "skills":
        return parse_skills(value)
    if name == "duration":
        return optional_text(value, "Duration", max_len=MAX_SHORT_TEXT_LENGTH)
    # start_date / end_date
    return parse_optional_date(value)


def clean_activity_data(data: Mapping, *, required: Sequence[str] = ()) -> dict:
    if not isinstance(data, Mapping):
        raise ValidationError("Activity must be a JSON object")

    unknown = sorted(set(data) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown or read-only field(s): {', '.join(unknown)}")
    missing = [f for f in required if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    return {name: _clean_field(name, data[name]) for name in EDITABLE_FIELDS if name in data}


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValidationError("End date cannot be before start date")


class ActivityService:
    """Student activity submissions and their faculty review.

    pending -> in_process -> approved | rejected; pending may also go straight
    to approved or rejected. Students edit or delete only while pending.
    """

    def __init__(self, activities: ActivityRepository):
        self._activities = activities

    # ===== STUDENT =====

    def submit(self, *, student_id: int, data: Mapping, now: datetime | None = None) -> Activity:
        fields = clean_activity_data(data, required=REQUIRED_FIELDS)
        _check_dates(fields.get("start_date"), fields.get("end_date"))
        now = now or now_local()

        activity_id = self._activities.create_activity(
            Activity(activity_id=0, student_id=int(student_id), created_at=now, **fields)
        )
        logger.info("Activity %s submitted by student %s (%s)", activity_id, student_id, fields["type"].value)
        return self._activities.get_by_id(activity_id)

    def list_for_student(self, student_id: int) -> Sequence[Activity]:
        return self._activities.list_for_student(int(student_id))

    def get(self, *, activity_id: int, requester: Identity) -> Activity:
        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        if requester.role == Role.STUDENT and activity.student_id != requester.user_id:
            raise AuthorizationError("Access denied")
        return activity

    def update(self, *, activity_id: int, student_id: int, data: Mapping, now: datetime | None = None) -> Activity:
        activity = self._get_own_pending(activity_id, student_id, "Cannot update verified activity")

        fields = clean_activity_data(data)
        merged = replace(activity, **fields)
        _check_dates(merged.start_date, merged.end_date)

        if fields:
            self._activities.update_activity(activity.activity_id, fields=fields, updated_at=now or now_local())
            logger.info("Activity %s updated by student %s (%s)", activity.activity_id, student_id, ", ".join(fields))
        return self._activities.get_by_id(activity.activity_id)

    def delete(self, *, activity_id: int, student_id: int) -> None:
        activity = self._get_own_pending(activity_id, student_id, "Cannot delete verified activity")
        self._activities.delete_activity(activity.activity_id)
        logger.info("Activity %s deleted by student %s", activity.activity_id, student_id)

    # ===== FACULTY =====

    def list_pending(self) -> Sequence[Activity]:
        return self._activities.list_by_status(ActivityStatus.PENDING)

    def verify(
        self,
        *,
        activity_id: int,
        verifier_id: int,
        status,
        rejection_reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> Activity:
        status = require_choice(status, ActivityStatus, "Status")
        if status not in REVIEW_OUTCOMES:
            raise ValidationError("Status must be one of: approved, rejected, in_process")

        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        if activity.status in (ActivityStatus.APPROVED, ActivityStatus.REJECTED):
            raise ValidationError("Activity has already been reviewed")

        reason = None
        if status == ActivityStatus.REJECTED:
            reason = optional_text(rejection_reason, "Rejection reason", max_len=MAX_TEXT_LENGTH)

        self._activities.set_verification(
            activity.activity_id,
            status=status,
            verified_by=int(verifier_id),
            verified_at=now or now_local(),
            rejection_reason=reason,
        )
        logger.info("Activity %s marked %s by %s", activity.activity_id, status.value, verifier_id)
        return self._activities.get_by_id(activity.activity_id)

    def _get_own_pending(self, activity_id: int, student_id: int, locked_message: str) -> Activity:
        activity = self._activities.get_by_id(int(activity_id))
        # someone else's activity looks the same as a missing one
        if not activity or activity.student_id != int(student_id):
            raise NotFoundError("Activity not found")
        if not activity.is_editable:
            raise ValidationError(locked_message)
        return activity
