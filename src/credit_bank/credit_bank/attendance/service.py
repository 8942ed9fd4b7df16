from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import DEFAULT_RECENT_SESSIONS, MAX_CLASS_ID_LENGTH, SESSION_TOKEN_BYTES
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AuthorizationError,
    ClassMismatchError,
    DuplicateError,
    ExpiredError,
    NotFoundError,
)
from .model import AttendanceRecord, AttendanceSession
from .repository import AttendanceRepository, SessionRepository

logger = logging.getLogger(__name__)


def new_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


class SessionService:
    """Lifecycle of QR attendance sessions.

    States: active -> expired (``now >= expires_at``, checked lazily) or
    deactivated (explicit, irreversible). Both reject further scans.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        token_factory: Optional[Callable[[], str]] = None,
    ):
        self._sessions = sessions
        self._token_factory = token_factory or new_session_token

    def create(
        self,
        *,
        owner_id: int,
        class_id: str,
        duration_minutes: int,
        now: datetime | None = None,
    ) -> AttendanceSession:
        class_id = require_non_empty(class_id, "Class id", max_len=MAX_CLASS_ID_LENGTH)
        duration = require_positive_int(duration_minutes, "Duration (minutes)")
        now = now or now_local()

        session_id = self._sessions.create_session(
            owner_id=int(owner_id),
            class_id=class_id,
            token=self._token_factory(),
            created_at=now,
            expires_at=now + timedelta(minutes=duration),
        )
        session = self._sessions.get_by_id(session_id)
        logger.info(
            "Session %s created for class %s by %s (expires %s)",
            session_id, class_id, owner_id, session.expires_at.isoformat(),
        )
        return session

    def validate(self, *, token: str, claimed_class_id: str, now: datetime | None = None) -> AttendanceSession:
        """Check that ``token`` can be redeemed for ``claimed_class_id`` right now."""

        now = now or now_local()
        token = require_non_empty(token, "Session token")
        claimed_class_id = require_non_empty(claimed_class_id, "Class id")

        session = self._sessions.get_by_token(token)
        if not session:
            raise NotFoundError("Invalid QR code")
        if not session.is_active:
            raise ExpiredError("QR code has been deactivated")
        if now >= session.expires_at:
            raise ExpiredError("QR code has expired")
        if session.class_id != claimed_class_id:
            raise ClassMismatchError("QR code does not belong to this class")
        return session

    def consume(self, session: AttendanceSession) -> AttendanceSession:
        self._sessions.increment_scan_count(session.session_id)
        return self._sessions.get_by_id(session.session_id)

    def validate_and_consume(
        self, *, token: str, claimed_class_id: str, now: datetime | None = None
    ) -> AttendanceSession:
        session = self.validate(token=token, claimed_class_id=claimed_class_id, now=now)
        return self.consume(session)

    def get_owned_session(self, *, session_id: int, requester_id: int) -> AttendanceSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("QR code not found")
        if session.owner_id != int(requester_id):
            raise AuthorizationError("Access denied")
        return session

    def deactivate(self, *, session_id: int, requester_id: int) -> AttendanceSession:
        session = self.get_owned_session(session_id=session_id, requester_id=requester_id)
        if session.is_active:
            self._sessions.deactivate(session.session_id)
            logger.info("Session %s deactivated by %s", session.session_id, requester_id)
        return self._sessions.get_by_id(session.session_id)

    def list_recent_for_owner(self, owner_id: int, *, limit: int = DEFAULT_RECENT_SESSIONS) -> Sequence[AttendanceSession]:
        return self._sessions.list_recent_for_owner(int(owner_id), int(limit))


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, sessions: SessionService):
        self._attendance = attendance
        self._sessions = sessions

    def record_attendance(
        self,
        *,
        student_id: int,
        token: str,
        class_id: str,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        try:
            session = self._sessions.validate(token=token, claimed_class_id=class_id, now=now)
        except (NotFoundError, ExpiredError, ClassMismatchError) as e:
            logger.info("Rejected scan by student %s for class %s: %s", student_id, class_id, e)
            raise

        existing = self._attendance.get_for_student_class_and_date(
            student_id=int(student_id), class_id=session.class_id, attendance_date=today
        )
        if existing:
            raise DuplicateError("Attendance already marked for this class today")

        record_id = self._attendance.create_record(
            student_id=int(student_id),
            class_id=session.class_id,
            session_id=session.session_id,
            recorded_by=session.owner_id,
            attendance_date=today,
            scanned_at=now,
            status=AttendanceStatus.PRESENT,
        )
        # Counted only once the record exists, so scan_count tracks stored records.
        self._sessions.consume(session)

        logger.info("Attendance %s: student %s present in %s", record_id, student_id, session.class_id)
        return self._attendance.get_by_id(record_id)

    def list_for_class(self, class_id: str, *, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        class_id = require_non_empty(class_id, "Class id", max_len=MAX_CLASS_ID_LENGTH)
        return self._attendance.list_for_class(class_id, attendance_date=day)

    def list_for_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_student(int(student_id))
