from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class WorkingTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for working time)."""

    @abstractmethod
    def worked_minutes(self, row) -> Optional[int]:
        raise NotImplementedError
