from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def week_bounds(anchor: date) -> tuple[date, date]:
    """Monday..Sunday of the ISO week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(anchor: date) -> tuple[date, date]:
    last = calendar.monthrange(anchor.year, anchor.month)[1]
    return anchor.replace(day=1), anchor.replace(day=last)


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date

    def validate(self) -> "DateRange":
        if self.start > self.end:
            raise ValidationError(
                f"Start date {self.start.isoformat()} is after end date {self.end.isoformat()}"
            )
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def parse(cls, start: str, end: str) -> "DateRange":
        return cls(parse_iso_date(start), parse_iso_date(end)).validate()

    def describe(self) -> str:
        return f"{self.start.strftime('%d %B %Y')} - {self.end.strftime('%d %B %Y')}"
