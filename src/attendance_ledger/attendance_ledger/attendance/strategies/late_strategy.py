from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...core.policy import AttendancePolicy, minutes_since_midnight
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the lateness threshold."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        late_by = minutes_since_midnight(now) - policy.workday_start_minutes
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {late_by} min")
