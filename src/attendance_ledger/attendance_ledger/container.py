from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_REPORT_NAME
from .core.policy import AttendancePolicy
from .database.connection import DBConfig, DatabaseConnection
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .reports.aggregation import AggregationEngine
from .reports.export.renderer import ReportRenderer
from .reports.service import ReportService
from .scope.resolver import ScopeResolver
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    policy: AttendancePolicy

    users_repo: MySQLUserRepository
    departments_repo: MySQLDepartmentRepository
    attendance_repo: MySQLAttendanceRepository
    leave_repo: MySQLLeaveRepository

    scope: ScopeResolver
    attendance_service: AttendanceService
    leave_service: LeaveService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    policy: AttendancePolicy | None = None,
    report_name: str = DEFAULT_REPORT_NAME,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    policy = policy or AttendancePolicy()
    scope = ScopeResolver()

    users_repo = MySQLUserRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        policy=policy,
        strategy_factory=AttendanceStrategyFactory(),
    )
    leave_service = LeaveService(leave_repo, users_repo, policy=policy, scope=scope)
    report_service = ReportService(
        attendance_repo,
        leave_repo,
        departments=departments_repo,
        scope=scope,
        engine=AggregationEngine(),
        renderer=ReportRenderer(report_name=report_name),
    )

    return Container(
        conn=conn,
        policy=policy,
        users_repo=users_repo,
        departments_repo=departments_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        scope=scope,
        attendance_service=attendance_service,
        leave_service=leave_service,
        report_service=report_service,
    )
