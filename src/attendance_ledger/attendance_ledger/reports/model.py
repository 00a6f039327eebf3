from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, GroupBy


def percent(count: int, total: int) -> int:
    """Whole percentage rounded half-up; 0 when ``total`` is 0."""
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


@dataclass(frozen=True)
class SeriesPoint:
    day: date
    label: str
    percent: int


@dataclass(frozen=True)
class MetricValue:
    value: Optional[int]
    estimated: bool
    source: str


@dataclass(frozen=True)
class TaskStats:
    completed: int
    total: int


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Derived figures for one date range; never persisted."""

    total: int = 0
    present: int = 0
    late: int = 0
    absent: int = 0
    leave: int = 0
    average_working_minutes: int = 0
    group_key: Any = None
    group_label: Optional[str] = None
    group_by: Optional[GroupBy] = None
    breakdown: tuple["StatisticsSnapshot", ...] = ()
    weekly: tuple[SeriesPoint, ...] = ()
    monthly: tuple[SeriesPoint, ...] = ()
    productivity: Optional[MetricValue] = None
    degraded: bool = False

    def count(self, status: AttendanceStatus) -> int:
        return {
            AttendanceStatus.PRESENT: self.present,
            AttendanceStatus.LATE: self.late,
            AttendanceStatus.ABSENT: self.absent,
            AttendanceStatus.LEAVE: self.leave,
        }[AttendanceStatus(status)]

    def rate(self, status: AttendanceStatus) -> int:
        return percent(self.count(status), self.total)


@dataclass(frozen=True)
class LeaveSummary:
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    approved_days: int = 0


@dataclass(frozen=True)
class ReportData:
    rows: Sequence[Any]
    snapshot: StatisticsSnapshot
    leave_summary: LeaveSummary = field(default_factory=LeaveSummary)
    scope_label: Optional[str] = None
