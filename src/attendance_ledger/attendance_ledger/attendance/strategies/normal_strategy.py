from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...core.policy import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """Check-in at or before the lateness threshold."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
