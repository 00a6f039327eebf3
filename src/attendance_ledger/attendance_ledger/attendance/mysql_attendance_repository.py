from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateCheckInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_RECORD_COLUMNS = "attendance_id, user_id, work_date, check_in_time, check_out_time, status, location, note"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        location=r.get("location"),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        location: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, check_in_time, status, location, note)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), work_date, check_in_time, status.value, location, note),
                )
            except mysql.connector.IntegrityError as exc:
                if not is_duplicate_key(exc):
                    raise
                # Lost the race against a concurrent check-in; report the winner.
                cur.execute(
                    f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s",
                    (int(user_id), work_date),
                )
                raise DuplicateCheckInError(_to_record(fetchone(cur))) from exc
            return int(cur.lastrowid)

    def update_checkout(self, *, attendance_id: int, user_id: int, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s
                WHERE attendance_id=%s AND user_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, int(attendance_id), int(user_id)),
            )
            return cur.rowcount > 0

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        dept_id: Optional[int] = None,
        user_id: Optional[int] = None,
        exclude_user_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if dept_id is not None:
            clauses.append("u.dept_id=%s")
            params.append(int(dept_id))
        if user_id is not None:
            clauses.append("u.user_id=%s")
            params.append(int(user_id))
        if exclude_user_id is not None:
            clauses.append("u.user_id<>%s")
            params.append(int(exclude_user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, u.user_id, u.full_name, u.employee_code,
                    u.dept_id, d.dept_name,
                    ar.work_date, ar.check_in_time, ar.check_out_time, ar.status, ar.location, ar.note
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                LEFT JOIN departments d ON d.dept_id = u.dept_id
                WHERE {where}
                ORDER BY ar.work_date DESC, u.full_name ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    employee_code=r["employee_code"],
                    dept_id=int(r["dept_id"]) if r.get("dept_id") is not None else None,
                    dept_name=r.get("dept_name"),
                    work_date=r["work_date"],
                    check_in_time=r["check_in_time"],
                    check_out_time=r.get("check_out_time"),
                    status=AttendanceStatus(r["status"]),
                    location=r.get("location"),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]
