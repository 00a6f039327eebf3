from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, LeaveType, RequestStatus

MISSING = "-"

STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.ABSENT: "Absent",
    AttendanceStatus.LEAVE: "Leave",
}

LEAVE_TYPE_LABELS = {
    LeaveType.ANNUAL: "Annual leave",
    LeaveType.SICK: "Sick leave",
    LeaveType.URGENT: "Urgent leave",
    LeaveType.OTHER: "Other",
}

REQUEST_STATUS_LABELS = {
    RequestStatus.PENDING: "Pending",
    RequestStatus.APPROVED: "Approved",
    RequestStatus.REJECTED: "Rejected",
}


def format_duration(total_minutes: Optional[int]) -> str:
    if total_minutes is None:
        return MISSING
    return f"{total_minutes // 60}h {total_minutes % 60}m"


def format_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else MISSING


def status_label(status: AttendanceStatus) -> str:
    return STATUS_LABELS.get(status, status.value)
