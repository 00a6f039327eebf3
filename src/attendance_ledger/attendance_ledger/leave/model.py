from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveType, RequestStatus


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive calendar-day overlap."""
    return a_start <= b_end and a_end >= b_start


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def is_active(self) -> bool:
        return self.status != RequestStatus.REJECTED

    def overlaps(self, start_date: date, end_date: date) -> bool:
        return ranges_overlap(self.start_date, self.end_date, start_date, end_date)


@dataclass(frozen=True)
class LeaveRequestRow(LeaveRequest):
    """Read-model: a request joined with its owner (for queues and summaries)."""

    full_name: str = ""
    dept_id: Optional[int] = None
    dept_name: Optional[str] = None


@dataclass(frozen=True)
class NewLeaveRequest:
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
