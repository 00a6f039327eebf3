from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .constants import DEFAULT_ANNUAL_LEAVE_QUOTA, DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORKDAY_START_MINUTES


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


@dataclass(frozen=True)
class AttendancePolicy:
    """Single source of truth for lateness and leave quota.

    A check-in is late only when its minute-of-day is strictly greater than
    ``late_threshold_minutes``; 08:15 with the defaults is still present.
    """

    workday_start_minutes: int = DEFAULT_WORKDAY_START_MINUTES
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    annual_leave_quota: int = DEFAULT_ANNUAL_LEAVE_QUOTA

    @property
    def late_threshold_minutes(self) -> int:
        return self.workday_start_minutes + self.late_grace_minutes

    def is_late(self, moment: datetime) -> bool:
        return minutes_since_midnight(moment) > self.late_threshold_minutes

    @classmethod
    def from_settings(cls, settings) -> "AttendancePolicy":
        start = str(getattr(settings, "WORKDAY_START", "08:00"))
        hours, _, minutes = start.partition(":")
        return cls(
            workday_start_minutes=int(hours) * 60 + int(minutes or 0),
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
            annual_leave_quota=int(getattr(settings, "ANNUAL_LEAVE_QUOTA", DEFAULT_ANNUAL_LEAVE_QUOTA)),
        )
