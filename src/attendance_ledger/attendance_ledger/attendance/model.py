from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One user's attendance for one calendar day."""

    attendance_id: int
    user_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    location: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports/exports: a record joined with its owner."""

    attendance_id: int
    user_id: int
    full_name: str
    employee_code: str
    dept_id: Optional[int]
    dept_name: Optional[str]
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    location: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class WorkingDuration:
    total_minutes: int

    @property
    def hours(self) -> int:
        return self.total_minutes // 60

    @property
    def minutes(self) -> int:
        return self.total_minutes % 60

    def __str__(self) -> str:
        return f"{self.hours}h {self.minutes}m"
