from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveRequest, LeaveRequestRow, NewLeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create_leave(self, new: NewLeaveRequest, *, created_at: datetime) -> int:
        """Overlap check and insert as one serialized unit per user.

        Raises OverlappingLeaveError when a non-rejected request of the same
        user shares at least one day with ``new``.
        """

        raise NotImplementedError

    def decide_leave(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        """Conditional on status='pending'; False if someone decided first."""

        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        exclude_user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequestRow]:
        raise NotImplementedError
