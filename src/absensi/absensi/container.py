from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.settings import OfficeSettings, TokenSettings
from .database.connection import DBConfig, DatabaseConnection
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .users.mysql_user_repository import MySQLRefreshTokenRepository, MySQLUserRepository
from .users.repository import RefreshTokenRepository, UserRepository
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    office: OfficeSettings

    users_repo: UserRepository
    refresh_tokens_repo: RefreshTokenRepository
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRepository

    token_service: TokenService
    auth_service: AuthService
    attendance_service: AttendanceService
    leave_service: LeaveService


def assemble(
    *,
    office: OfficeSettings,
    tokens: TokenSettings,
    users_repo: UserRepository,
    refresh_tokens_repo: RefreshTokenRepository,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRepository,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    token_service = TokenService(tokens)
    return Container(
        office=office,
        users_repo=users_repo,
        refresh_tokens_repo=refresh_tokens_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        token_service=token_service,
        auth_service=AuthService(users_repo, refresh_tokens_repo, tokens=token_service),
        attendance_service=AttendanceService(attendance_repo, settings=office),
        leave_service=LeaveService(leave_repo, settings=office),
    )


def build_container(*, db_config: Mapping[str, Any], office: OfficeSettings, tokens: TokenSettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return assemble(
        office=office,
        tokens=tokens,
        users_repo=MySQLUserRepository(conn),
        refresh_tokens_repo=MySQLRefreshTokenRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRepository(conn),
    )
