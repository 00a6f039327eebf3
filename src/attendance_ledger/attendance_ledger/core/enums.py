from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of caller roles used for scoping."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record, derived once at check-in."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    LEAVE = "leave"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    URGENT = "urgent"
    OTHER = "other"


class RequestStatus(str, Enum):
    """Leave request workflow: pending -> approved | rejected (terminal)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> RequestStatus:
        if self is LeaveDecision.APPROVE:
            return RequestStatus.APPROVED
        return RequestStatus.REJECTED


class GroupBy(str, Enum):
    USER = "user"
    DEPARTMENT = "department"


class ReportFormat(str, Enum):
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    DELIMITED_TEXT = "delimited-text"

    @property
    def extension(self) -> str:
        return {
            ReportFormat.DOCUMENT: "pdf",
            ReportFormat.SPREADSHEET: "xlsx",
            ReportFormat.DELIMITED_TEXT: "csv",
        }[self]

    @property
    def content_type(self) -> str:
        return {
            ReportFormat.DOCUMENT: "application/pdf",
            ReportFormat.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            ReportFormat.DELIMITED_TEXT: "text/csv; charset=utf-8",
        }[self]
