from __future__ import annotations

from typing import Optional

from ...attendance.service import working_duration
from .base import WorkingTimeCalculator


class StandardWorkingTimeCalculator(WorkingTimeCalculator):
    """Standard rule: floor((out - in) / 1 min); None while the record is open."""

    def worked_minutes(self, row) -> Optional[int]:
        duration = working_duration(row)
        return duration.total_minutes if duration else None
