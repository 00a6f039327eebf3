from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ...attendance.service import working_duration
from ...common.datetime_utils import DateRange
from ...common.formatting import MISSING, format_duration, format_time, status_label
from ...core.enums import AttendanceStatus, GroupBy
from ..model import StatisticsSnapshot, percent

REPORT_TITLE = "Attendance Report"

TABLE_COLUMNS = (
    "Date",
    "Employee Name",
    "Employee ID",
    "Department",
    "Check-in",
    "Check-out",
    "Duration",
    "Status",
    "Location",
)

DEPARTMENT_COLUMNS = ("Department", "Total", "Present", "Late", "Absent", "Leave", "Present %")

# Leading characters that make spreadsheet apps evaluate a cell.
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


@dataclass(frozen=True)
class ReportContent:
    """Everything a writer prints, already formatted.

    Built once per export so all three encodings show identical labels and
    numbers.
    """

    title: str
    period: str
    stats: tuple[tuple[str, str], ...]
    columns: tuple[str, ...]
    table: tuple[tuple[str, ...], ...]
    departments: tuple[tuple, ...]


def _count_with_rate(snapshot: StatisticsSnapshot, status: AttendanceStatus) -> str:
    return f"{snapshot.count(status)} ({snapshot.rate(status)}%)"


def stats_lines(snapshot: StatisticsSnapshot) -> tuple[tuple[str, str], ...]:
    return (
        ("Total records", str(snapshot.total)),
        ("Present", _count_with_rate(snapshot, AttendanceStatus.PRESENT)),
        ("Late", _count_with_rate(snapshot, AttendanceStatus.LATE)),
        ("Absent", _count_with_rate(snapshot, AttendanceStatus.ABSENT)),
        ("Leave", _count_with_rate(snapshot, AttendanceStatus.LEAVE)),
        ("Average hours", format_duration(snapshot.average_working_minutes)),
    )


def text_cell(value: str | None) -> str:
    """Free text as a cell value; spreadsheet formula triggers are quoted.

    Applied before any writer runs, so CSV, XLSX and PDF show the same text.
    """
    if not value:
        return MISSING
    if value != MISSING and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def table_row(row) -> tuple[str, ...]:
    duration = working_duration(row)
    return (
        row.work_date.strftime("%Y-%m-%d"),
        text_cell(row.full_name),
        text_cell(row.employee_code),
        text_cell(row.dept_name),
        format_time(row.check_in_time),
        format_time(row.check_out_time),
        format_duration(duration.total_minutes if duration else None),
        status_label(AttendanceStatus(row.status)),
        text_cell(row.location),
    )


def department_rows(snapshot: StatisticsSnapshot) -> tuple[tuple, ...]:
    """Recap lines from a department breakdown; empty for other groupings."""
    if snapshot.group_by is not GroupBy.DEPARTMENT:
        return ()
    return tuple(
        (
            text_cell(d.group_label),
            d.total,
            d.present,
            d.late,
            d.absent,
            d.leave,
            f"{percent(d.present, d.total)}%",
        )
        for d in snapshot.breakdown
    )


def build_content(
    snapshot: StatisticsSnapshot,
    rows: Sequence,
    date_range: DateRange,
    *,
    title: str = REPORT_TITLE,
) -> ReportContent:
    return ReportContent(
        title=title,
        period=f"Period: {date_range.describe()}",
        stats=stats_lines(snapshot),
        columns=TABLE_COLUMNS,
        table=tuple(table_row(r) for r in rows),
        departments=department_rows(snapshot),
    )
