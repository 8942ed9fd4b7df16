from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceSession
from .repository import SessionRepository

_SESSION_COLUMNS = "session_id, owner_id, class_id, token, created_at, expires_at, is_active, scan_count"


def _to_session(row: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(row["session_id"]),
        owner_id=int(row["owner_id"]),
        class_id=row["class_id"],
        token=row["token"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
        is_active=bool(row["is_active"]),
        scan_count=int(row["scan_count"] or 0),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_session(
        self,
        *,
        owner_id: int,
        class_id: str,
        token: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory, duplicate_message="Session token already in use") as cur:
            cur.execute(
                """
                INSERT INTO attendance_sessions(owner_id, class_id, token, created_at, expires_at, is_active, scan_count)
                VALUES(%s,%s,%s,%s,%s,1,0)
                """,
                (owner_id, class_id, token, created_at, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (session_id,))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_by_token(self, token: str) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE token=%s", (token,))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def increment_scan_count(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                "UPDATE attendance_sessions SET scan_count = scan_count + 1 WHERE session_id=%s",
                (session_id,),
            )
            return cur.rowcount > 0

    def deactivate(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as cur:
            cur.execute("UPDATE attendance_sessions SET is_active=0 WHERE session_id=%s", (session_id,))
            return cur.rowcount > 0

    def list_recent_for_owner(self, owner_id: int, limit: int) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE owner_id=%s
                ORDER BY created_at DESC, session_id DESC
                LIMIT %s
                """,
                (owner_id, int(limit)),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def count_sessions(self, *, active_at: Optional[datetime] = None) -> int:
        with db_cursor(self._conn_factory) as cur:
            if active_at is None:
                cur.execute("SELECT COUNT(*) AS total FROM attendance_sessions")
            else:
                cur.execute(
                    "SELECT COUNT(*) AS total FROM attendance_sessions WHERE is_active=1 AND expires_at > %s",
                    (active_at,),
                )
            row = fetchone(cur)
            return int(row["total"]) if row else 0
