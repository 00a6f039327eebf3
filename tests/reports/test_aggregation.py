from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.attendance_ledger.attendance_ledger.attendance.model import AttendanceReportRow
from src.attendance_ledger.attendance_ledger.common.datetime_utils import DateRange
from src.attendance_ledger.attendance_ledger.core.enums import AttendanceStatus, GroupBy, RequestStatus
from src.attendance_ledger.attendance_ledger.core.exceptions import ValidationError
from src.attendance_ledger.attendance_ledger.reports.aggregation import AggregationEngine
from src.attendance_ledger.attendance_ledger.reports.model import TaskStats, percent

P, L, A, LV = AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT, AttendanceStatus.LEAVE

DEPTS = {5: "Engineering", 7: "Finance"}


def row(user_id, day, status, check_in=(8, 0), check_out=None, dept_id=5):
    check_in_time = datetime.combine(day, datetime.min.time()).replace(hour=check_in[0], minute=check_in[1])
    check_out_time = (
        datetime.combine(day, datetime.min.time()).replace(hour=check_out[0], minute=check_out[1])
        if check_out
        else None
    )
    return AttendanceReportRow(
        attendance_id=0,
        user_id=user_id,
        full_name=f"User {user_id}",
        employee_code=f"EMP-{user_id:03d}",
        dept_id=dept_id,
        dept_name=DEPTS.get(dept_id),
        work_date=day,
        check_in_time=check_in_time,
        check_out_time=check_out_time,
        status=status,
    )


APRIL = DateRange(date(2025, 4, 1), date(2025, 4, 30))


def test_rates_round_half_up():
    statuses = [P, P, P, P, P, L, L, LV]
    rows = [row(i, date(2025, 4, 1 + i), s) for i, s in enumerate(statuses)]

    snap = AggregationEngine().aggregate(rows, APRIL)

    assert (snap.total, snap.present, snap.late, snap.absent, snap.leave) == (8, 5, 2, 0, 1)
    assert snap.rate(P) == 63
    assert snap.rate(L) == 25
    assert snap.rate(A) == 0
    assert snap.rate(LV) == 13


def test_empty_range_yields_zeros():
    snap = AggregationEngine().aggregate([], APRIL)

    assert snap.total == 0
    assert snap.rate(P) == 0
    assert snap.average_working_minutes == 0
    assert len(snap.weekly) == 7 and all(p.percent == 0 for p in snap.weekly)
    assert snap.productivity.value is None


def test_percent_helper():
    assert percent(1, 8) == 13
    assert percent(0, 0) == 0
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67


def test_filter_is_inclusive_by_calendar_day():
    rows = [
        row(1, date(2025, 3, 31), P),
        row(1, date(2025, 4, 1), P, check_in=(23, 59)),
        row(1, date(2025, 4, 30), P),
        row(1, date(2025, 5, 1), P),
    ]

    assert AggregationEngine().aggregate(rows, APRIL).total == 2


def test_average_uses_only_completed_records():
    rows = [
        row(1, date(2025, 4, 1), L, (8, 20), (17, 0)),
        row(2, date(2025, 4, 1), P, (8, 0), (16, 0)),
        row(3, date(2025, 4, 1), P, (8, 0)),
    ]

    assert AggregationEngine().aggregate(rows, APRIL).average_working_minutes == 500


def test_average_rounds_half_up():
    rows = [
        row(1, date(2025, 4, 1), P, (8, 0), (16, 1)),
        row(2, date(2025, 4, 1), P, (8, 0), (16, 0)),
    ]

    assert AggregationEngine().aggregate(rows, APRIL).average_working_minutes == 481


def test_weekly_series_is_monday_first_and_zero_filled():
    rows = [
        row(1, date(2025, 4, 7), P),
        row(2, date(2025, 4, 7), A),
        row(1, date(2025, 4, 8), L),
    ]
    rng = DateRange(date(2025, 4, 1), date(2025, 4, 10))

    snap = AggregationEngine().aggregate(rows, rng)

    assert [p.label for p in snap.weekly] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert snap.weekly[0].day == date(2025, 4, 7)
    assert [p.percent for p in snap.weekly] == [50, 100, 0, 0, 0, 0, 0]


def test_series_with_headcount_denominator():
    rows = [row(1, date(2025, 4, 7), P), row(2, date(2025, 4, 7), A)]

    snap = AggregationEngine().aggregate(rows, APRIL, headcount=4)

    assert len(snap.monthly) == 30
    assert snap.monthly[6].label == "7"
    assert snap.monthly[6].percent == 25


def test_group_by_department():
    rows = [
        row(1, date(2025, 4, 1), P, dept_id=5),
        row(2, date(2025, 4, 1), L, dept_id=5),
        row(3, date(2025, 4, 1), P, dept_id=7),
    ]

    snap = AggregationEngine().aggregate(rows, APRIL, GroupBy.DEPARTMENT)

    assert [(s.group_label, s.total, s.present) for s in snap.breakdown] == [("Engineering", 2, 1), ("Finance", 1, 1)]
    assert snap.breakdown[0].rate(L) == 50


def test_group_by_user():
    rows = [row(1, date(2025, 4, 1), P), row(1, date(2025, 4, 2), L), row(2, date(2025, 4, 1), P)]

    snap = AggregationEngine().aggregate(rows, APRIL, "user")

    assert [(s.group_key, s.total) for s in snap.breakdown] == [(1, 2), (2, 1)]
    assert snap.breakdown[0].group_label == "User 1"


def test_no_group_by_has_no_breakdown():
    assert AggregationEngine().aggregate([row(1, date(2025, 4, 1), P)], APRIL).breakdown == ()


def test_reversed_range_is_invalid():
    with pytest.raises(ValidationError):
        AggregationEngine().aggregate([], DateRange(date(2025, 4, 2), date(2025, 4, 1)))


def test_productivity_measured_from_tasks():
    metric = AggregationEngine.productivity([], TaskStats(completed=3, total=4))

    assert (metric.value, metric.estimated, metric.source) == (75, False, "tasks")


def test_productivity_without_tasks_is_flagged_estimate():
    rows = [row(1, date(2025, 4, 1), P), row(2, date(2025, 4, 1), A)]

    metric = AggregationEngine().aggregate(rows, APRIL).productivity

    assert (metric.value, metric.estimated, metric.source) == (50, True, "attendance")


def test_summarize_leave_clips_approved_days_to_range():
    requests = [
        SimpleNamespace(start_date=date(2025, 3, 30), end_date=date(2025, 4, 2), status=RequestStatus.APPROVED),
        SimpleNamespace(start_date=date(2025, 4, 10), end_date=date(2025, 4, 10), status=RequestStatus.PENDING),
        SimpleNamespace(start_date=date(2025, 4, 11), end_date=date(2025, 4, 12), status=RequestStatus.REJECTED),
        SimpleNamespace(start_date=date(2025, 5, 1), end_date=date(2025, 5, 3), status=RequestStatus.APPROVED),
    ]

    summary = AggregationEngine.summarize_leave(requests, APRIL)

    assert (summary.pending, summary.approved, summary.rejected) == (1, 1, 1)
    assert summary.approved_days == 2
