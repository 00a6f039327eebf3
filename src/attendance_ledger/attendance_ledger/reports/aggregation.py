from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import DateRange, iter_days, month_bounds, week_bounds
from ..core.enums import AttendanceStatus, GroupBy, RequestStatus
from ..leave.model import ranges_overlap
from .calculator.base import WorkingTimeCalculator
from .calculator.standard_calculator import StandardWorkingTimeCalculator
from .model import LeaveSummary, MetricValue, SeriesPoint, StatisticsSnapshot, TaskStats, percent

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class AggregationEngine:
    """Pure reduction of attendance rows into a ``StatisticsSnapshot``.

    Rows need ``work_date``, ``status``, ``check_in_time`` and
    ``check_out_time``; grouping additionally reads ``user_id``/``full_name``
    or ``dept_id``/``dept_name``.
    """

    def __init__(self, calculator: Optional[WorkingTimeCalculator] = None):
        self._calculator = calculator or StandardWorkingTimeCalculator()

    def aggregate(
        self,
        records: Iterable,
        date_range: DateRange,
        group_by: Optional[GroupBy] = None,
        *,
        headcount: Optional[int] = None,
        tasks: Optional[TaskStats] = None,
    ) -> StatisticsSnapshot:
        date_range.validate()
        rows = [r for r in records if date_range.contains(r.work_date)]

        base = self._reduce(rows)
        breakdown: tuple[StatisticsSnapshot, ...] = ()
        if group_by is not None:
            group_by = GroupBy(group_by)
            breakdown = self._breakdown(rows, group_by)

        return StatisticsSnapshot(
            total=base.total,
            present=base.present,
            late=base.late,
            absent=base.absent,
            leave=base.leave,
            average_working_minutes=base.average_working_minutes,
            group_by=group_by,
            breakdown=breakdown,
            weekly=self.weekly_series(rows, date_range.end, headcount=headcount),
            monthly=self.monthly_series(rows, date_range.end, headcount=headcount),
            productivity=self.productivity(rows, tasks),
        )

    def _reduce(self, rows: Sequence, *, key=None, label: Optional[str] = None) -> StatisticsSnapshot:
        counts = Counter(AttendanceStatus(r.status) for r in rows)
        worked = [m for m in (self._calculator.worked_minutes(r) for r in rows) if m is not None]
        average = (2 * sum(worked) + len(worked)) // (2 * len(worked)) if worked else 0
        return StatisticsSnapshot(
            total=len(rows),
            present=counts[AttendanceStatus.PRESENT],
            late=counts[AttendanceStatus.LATE],
            absent=counts[AttendanceStatus.ABSENT],
            leave=counts[AttendanceStatus.LEAVE],
            average_working_minutes=average,
            group_key=key,
            group_label=label,
        )

    def _breakdown(self, rows: Sequence, group_by: GroupBy) -> tuple[StatisticsSnapshot, ...]:
        groups: dict = defaultdict(list)
        labels: dict = {}
        for r in rows:
            if group_by is GroupBy.USER:
                key, label = r.user_id, getattr(r, "full_name", None) or str(r.user_id)
            else:
                key, label = getattr(r, "dept_id", None), getattr(r, "dept_name", None) or "-"
            groups[key].append(r)
            labels[key] = label

        snapshots = [self._reduce(items, key=key, label=labels[key]) for key, items in groups.items()]
        snapshots.sort(key=lambda s: (s.group_label or "", str(s.group_key)))
        return tuple(snapshots)

    def weekly_series(self, rows: Sequence, anchor: date, *, headcount: Optional[int] = None) -> tuple[SeriesPoint, ...]:
        """Seven points, Monday first, for the ISO week containing ``anchor``."""
        start, end = week_bounds(anchor)
        return self._daily_series(rows, start, end, headcount, lambda d: WEEKDAY_LABELS[d.weekday()])

    def monthly_series(self, rows: Sequence, anchor: date, *, headcount: Optional[int] = None) -> tuple[SeriesPoint, ...]:
        start, end = month_bounds(anchor)
        return self._daily_series(rows, start, end, headcount, lambda d: str(d.day))

    @staticmethod
    def _daily_series(rows, start: date, end: date, headcount, label_for) -> tuple[SeriesPoint, ...]:
        per_day: dict[date, list] = defaultdict(list)
        for r in rows:
            if start <= r.work_date <= end:
                per_day[r.work_date].append(r)

        points = []
        for day in iter_days(start, end):
            day_rows = per_day.get(day, [])
            attended = sum(1 for r in day_rows if AttendanceStatus(r.status) in _ATTENDED)
            denominator = headcount if headcount is not None else len(day_rows)
            points.append(SeriesPoint(day=day, label=label_for(day), percent=percent(attended, denominator)))
        return tuple(points)

    @staticmethod
    def productivity(rows: Sequence, tasks: Optional[TaskStats] = None) -> MetricValue:
        if tasks is not None and tasks.total > 0:
            return MetricValue(value=percent(tasks.completed, tasks.total), estimated=False, source="tasks")
        if rows:
            attended = sum(1 for r in rows if AttendanceStatus(r.status) in _ATTENDED)
            return MetricValue(value=percent(attended, len(rows)), estimated=True, source="attendance")
        return MetricValue(value=None, estimated=False, source="none")

    @staticmethod
    def summarize_leave(requests: Iterable, date_range: DateRange) -> LeaveSummary:
        """Status counts for requests touching the range; approved days clipped to it."""
        counts: Counter = Counter()
        approved_days = 0
        for r in requests:
            if not ranges_overlap(r.start_date, r.end_date, date_range.start, date_range.end):
                continue
            status = RequestStatus(r.status)
            counts[status] += 1
            if status == RequestStatus.APPROVED:
                first = max(r.start_date, date_range.start)
                last = min(r.end_date, date_range.end)
                approved_days += (last - first).days + 1
        return LeaveSummary(
            pending=counts[RequestStatus.PENDING],
            approved=counts[RequestStatus.APPROVED],
            rejected=counts[RequestStatus.REJECTED],
            approved_days=approved_days,
        )
