from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.attendance_ledger.attendance_ledger.attendance.model import AttendanceRecord, AttendanceReportRow
from src.attendance_ledger.attendance_ledger.core.enums import AttendanceStatus, RequestStatus, Role
from src.attendance_ledger.attendance_ledger.core.exceptions import (
    DuplicateCheckInError,
    NotFoundError,
    OverlappingLeaveError,
    StorageError,
)
from src.attendance_ledger.attendance_ledger.leave.model import LeaveRequest, LeaveRequestRow
from src.attendance_ledger.attendance_ledger.users.department_model import Department
from src.attendance_ledger.attendance_ledger.users.model import User


class InMemoryUsers:
    def __init__(self, users: list[User]):
        self.by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(user_id)


class InMemoryDepartments:
    def __init__(self, departments: list[Department]):
        self.by_id = {d.dept_id: d for d in departments}

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        return self.by_id.get(dept_id)


class InMemoryAttendance:
    """Mirrors the MySQL repository, including the (user_id, work_date) constraint."""

    def __init__(self, users: InMemoryUsers, departments: InMemoryDepartments):
        self._users = users
        self._departments = departments
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.fail = False
        self.last_report_args: Optional[dict] = None

    def _check(self):
        if self.fail:
            raise StorageError("connection refused")

    def add(self, user_id: int, check_in: datetime, check_out: Optional[datetime] = None, status=None, location=None):
        self._id += 1
        status = status or (AttendanceStatus.LATE if (check_in.hour, check_in.minute) > (8, 15) else AttendanceStatus.PRESENT)
        rec = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            work_date=check_in.date(),
            check_in_time=check_in,
            check_out_time=check_out,
            status=status,
            location=location,
        )
        self.records[rec.attendance_id] = rec
        return rec

    def get_by_id(self, attendance_id: int):
        self._check()
        return self.records.get(attendance_id)

    def get_recent_for_user(self, user_id: int, limit: int):
        self._check()
        items = [r for r in self.records.values() if r.user_id == user_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def get_for_user_and_date(self, user_id: int, work_date: date):
        self._check()
        return self._find(user_id, work_date)

    def _find(self, user_id: int, work_date: date):
        for r in self.records.values():
            if r.user_id == user_id and r.work_date == work_date:
                return r
        return None

    def create_checkin(self, *, user_id, work_date, check_in_time, status, location=None, note=None) -> int:
        self._check()
        existing = self._find(user_id, work_date)
        if existing:
            raise DuplicateCheckInError(existing)
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            location=location,
            note=note,
        )
        return self._id

    def update_checkout(self, *, attendance_id, user_id, check_out_time) -> bool:
        self._check()
        rec = self.records.get(attendance_id)
        if not rec or rec.user_id != user_id or rec.check_out_time is not None:
            return False
        self.records[attendance_id] = replace(rec, check_out_time=check_out_time)
        return True

    def get_report_rows(self, *, start_date, end_date, dept_id=None, user_id=None, exclude_user_id=None):
        self._check()
        self.last_report_args = dict(
            start_date=start_date, end_date=end_date, dept_id=dept_id, user_id=user_id, exclude_user_id=exclude_user_id
        )
        out = []
        for r in sorted(self.records.values(), key=lambda r: (r.work_date, r.user_id)):
            user = self._users.get_by_id(r.user_id)
            if not (start_date <= r.work_date <= end_date):
                continue
            if dept_id is not None and user.dept_id != dept_id:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            if exclude_user_id is not None and r.user_id == exclude_user_id:
                continue
            dept = self._departments.get_by_id(user.dept_id) if user.dept_id is not None else None
            out.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    user_id=r.user_id,
                    full_name=user.full_name,
                    employee_code=user.employee_code,
                    dept_id=user.dept_id,
                    dept_name=dept.dept_name if dept else None,
                    work_date=r.work_date,
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time,
                    status=r.status,
                    location=r.location,
                    note=r.note,
                )
            )
        return out


class InMemoryLeaves:
    """Mirrors the MySQL repository: overlap check on create, conditional decide."""

    def __init__(self, users: InMemoryUsers, departments: InMemoryDepartments):
        self._users = users
        self._departments = departments
        self.requests: dict[int, LeaveRequest] = {}
        self._id = 0

    def get_by_id(self, request_id: int):
        return self.requests.get(request_id)

    def create_leave(self, new, *, created_at) -> int:
        if not self._users.get_by_id(new.user_id):
            raise NotFoundError(f"User {new.user_id} does not exist")
        for r in sorted(self.requests.values(), key=lambda r: r.start_date):
            if r.user_id == new.user_id and r.is_active and r.overlaps(new.start_date, new.end_date):
                raise OverlappingLeaveError(r)
        self._id += 1
        self.requests[self._id] = LeaveRequest(
            request_id=self._id,
            user_id=new.user_id,
            leave_type=new.leave_type,
            start_date=new.start_date,
            end_date=new.end_date,
            reason=new.reason,
            status=RequestStatus.PENDING,
            created_at=created_at,
        )
        return self._id

    def decide_leave(self, *, request_id, status, approved_by, approved_at) -> bool:
        r = self.requests.get(request_id)
        if not r or r.status != RequestStatus.PENDING:
            return False
        self.requests[request_id] = replace(r, status=status, approved_by=approved_by, approved_at=approved_at)
        return True

    def list_requests(
        self,
        *,
        status=None,
        user_id=None,
        dept_id=None,
        exclude_user_id=None,
        start_date=None,
        end_date=None,
        limit=None,
    ):
        out = []
        for r in self.requests.values():
            user = self._users.get_by_id(r.user_id)
            if status is not None and r.status != status:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            if dept_id is not None and user.dept_id != dept_id:
                continue
            if exclude_user_id is not None and r.user_id == exclude_user_id:
                continue
            if start_date is not None and r.end_date < start_date:
                continue
            if end_date is not None and r.start_date > end_date:
                continue
            dept = self._departments.get_by_id(user.dept_id) if user.dept_id is not None else None
            out.append(
                LeaveRequestRow(
                    **{f: getattr(r, f) for f in LeaveRequest.__dataclass_fields__},
                    full_name=user.full_name,
                    dept_id=user.dept_id,
                    dept_name=dept.dept_name if dept else None,
                )
            )
        return out[:limit] if limit is not None else out


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 4, 10, 8, 20, 0)


# Departments: 1 Administration, 5 Engineering, 7 Finance.
@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(1, "Ada Admin", "admin", "EMP-001", Role.ADMIN, 1),
            User(2, "Maya Manager", "maya", "EMP-002", Role.MANAGER, 5),
            User(3, "Evan Employee", "evan", "EMP-003", Role.EMPLOYEE, 5),
            User(4, "Sara Seven", "sara", "EMP-004", Role.EMPLOYEE, 7),
            User(5, "Omar Manager", "omar", "EMP-005", Role.MANAGER, 7),
            User(6, "Ivan Inactive", "ivan", "EMP-006", Role.EMPLOYEE, 5, is_active=False),
            User(7, "Nina Unassigned", "nina", "EMP-007", Role.EMPLOYEE, None),
        ]
    )


@pytest.fixture
def departments() -> InMemoryDepartments:
    return InMemoryDepartments(
        [
            Department(1, "Administration"),
            Department(5, "Engineering"),
            Department(7, "Finance"),
        ]
    )


@pytest.fixture
def attendance_repo(users, departments) -> InMemoryAttendance:
    return InMemoryAttendance(users, departments)


@pytest.fixture
def leave_repo(users, departments) -> InMemoryLeaves:
    return InMemoryLeaves(users, departments)
