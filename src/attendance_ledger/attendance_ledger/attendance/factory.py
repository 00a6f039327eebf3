from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.policy import AttendancePolicy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the policy."""

    def for_checkin(self, *, now: datetime, policy: AttendancePolicy) -> AttendanceStrategy:
        if policy.is_late(now):
            return LateStrategy()
        return NormalStrategy()
