from __future__ import annotations

from dataclasses import dataclass

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.repository import ActivityRepository
from .activities.service import ActivityService
from .analytics.service import AttendanceAnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.repository import AttendanceRepository, SessionRepository
from .attendance.service import AttendanceService, SessionService
from .core.constants import DEFAULT_TOKEN_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import ProfileService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenIssuer


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    profiles_repo: ProfileRepository
    activities_repo: ActivityRepository

    auth_service: AuthService
    user_service: UserService
    session_service: SessionService
    attendance_service: AttendanceService
    profile_service: ProfileService
    activity_service: ActivityService
    analytics_service: AttendanceAnalyticsService


def build_services(
    *,
    users_repo: UserRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    profiles_repo: ProfileRepository,
    activities_repo: ActivityRepository,
    jwt_secret: str,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    tokens = TokenIssuer(jwt_secret, ttl_hours=token_ttl_hours)
    session_service = SessionService(sessions_repo)

    return Container(
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        profiles_repo=profiles_repo,
        activities_repo=activities_repo,
        auth_service=AuthService(users_repo, tokens),
        user_service=UserService(users_repo),
        session_service=session_service,
        attendance_service=AttendanceService(attendance_repo, session_service),
        profile_service=ProfileService(profiles_repo, users_repo),
        activity_service=ActivityService(activities_repo),
        analytics_service=AttendanceAnalyticsService(attendance_repo, sessions_repo, users_repo, activities_repo),
    )


def build_container(*, db_config: dict, jwt_secret: str, token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        profiles_repo=MySQLProfileRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        jwt_secret=jwt_secret,
        token_ttl_hours=token_ttl_hours,
    )
