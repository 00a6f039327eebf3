from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveType, RequestStatus
from ..core.exceptions import NotFoundError, OverlappingLeaveError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest, LeaveRequestRow, NewLeaveRequest
from .repository import LeaveRepository

_COLUMNS = (
    "r.request_id, r.user_id, r.leave_type, r.start_date, r.end_date, r.reason, "
    "r.status, r.created_at, r.approved_by, r.approved_at"
)


def _fields(r: dict) -> dict:
    return dict(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests r WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return LeaveRequest(**_fields(r)) if r else None

    def create_leave(self, new: NewLeaveRequest, *, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the owner serializes concurrent submissions for one user.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (int(new.user_id),))
            if not fetchone(cur):
                raise NotFoundError(f"User {new.user_id} does not exist")

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests r
                WHERE r.user_id=%s AND r.status<>%s AND r.start_date<=%s AND r.end_date>=%s
                ORDER BY r.start_date
                LIMIT 1
                """,
                (int(new.user_id), RequestStatus.REJECTED.value, new.end_date, new.start_date),
            )
            conflict = fetchone(cur)
            if conflict:
                raise OverlappingLeaveError(LeaveRequest(**_fields(conflict)))

            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, start_date, end_date, reason, status, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.user_id),
                    new.leave_type.value,
                    new.start_date,
                    new.end_date,
                    new.reason,
                    RequestStatus.PENDING.value,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def decide_leave(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(approved_by), approved_at, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        exclude_user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequestRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("r.user_id=%s")
            params.append(int(user_id))
        if dept_id is not None:
            clauses.append("u.dept_id=%s")
            params.append(int(dept_id))
        if exclude_user_id is not None:
            clauses.append("r.user_id<>%s")
            params.append(int(exclude_user_id))
        if start_date is not None:
            clauses.append("r.end_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("r.start_date<=%s")
            params.append(end_date)

        sql = f"""
            SELECT {_COLUMNS}, u.full_name, u.dept_id, d.dept_name
            FROM leave_requests r
            JOIN users u ON u.user_id = r.user_id
            LEFT JOIN departments d ON d.dept_id = u.dept_id
            WHERE {" AND ".join(clauses)}
            ORDER BY r.created_at DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                LeaveRequestRow(
                    **_fields(r),
                    full_name=r["full_name"],
                    dept_id=int(r["dept_id"]) if r.get("dept_id") is not None else None,
                    dept_name=r.get("dept_name"),
                )
                for r in fetchall(cur)
            ]
