from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Sequence

from ..common.datetime_utils import now_local
from ..common.formatting import LEAVE_TYPE_LABELS, REQUEST_STATUS_LABELS
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_PENDING_LIMIT
from ..core.enums import LeaveDecision, LeaveType, RequestStatus
from ..core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from ..core.policy import AttendancePolicy
from ..scope.resolver import Actor, ScopeResolver
from ..users.repository import UserRepository
from .model import LeaveRequest, LeaveRequestRow, NewLeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        *,
        policy: AttendancePolicy | None = None,
        scope: ScopeResolver | None = None,
    ):
        self._leaves = leaves
        self._users = users
        self._policy = policy or AttendancePolicy()
        self._scope = scope or ScopeResolver()

    def submit(
        self,
        user_id: int,
        leave_type: LeaveType | str,
        start_date: date,
        end_date: date,
        reason: str,
        *,
        now: datetime | None = None,
    ) -> LeaveRequest:
        now = now or now_local()
        leave_type = require_enum(leave_type, LeaveType, "Leave type")
        if start_date > end_date:
            raise ValidationError("End date must be on or after start date")
        reason = require_non_empty(reason, "Reason")

        if not self._users.get_by_id(user_id):
            raise NotFoundError(f"User {user_id} does not exist")

        new = NewLeaveRequest(
            user_id=int(user_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        try:
            request_id = self._leaves.create_leave(new, created_at=now)
        except OverlappingLeaveError as exc:
            logger.warning("Leave request refused user=%s %s..%s (%s)", user_id, start_date, end_date, exc.code)
            raise
        logger.info(
            "Leave request #%s submitted user=%s %s..%s type=%s",
            request_id, user_id, start_date, end_date, leave_type.value,
        )
        return LeaveRequest(
            request_id=request_id,
            user_id=new.user_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=now,
        )

    def decide(
        self,
        request_id: int,
        actor: Actor,
        decision: LeaveDecision | str,
        *,
        now: datetime | None = None,
    ) -> LeaveRequest:
        """Approve or reject a pending request. A second decision always fails."""
        now = now or now_local()
        decision = require_enum(decision, LeaveDecision, "Decision")

        request = self._leaves.get_by_id(request_id)
        if not request:
            raise NotFoundError(f"Leave request {request_id} not found")

        owner = self._users.get_by_id(request.user_id)
        if not owner:
            raise NotFoundError(f"User {request.user_id} does not exist")
        try:
            self._scope.ensure_can_decide(actor, owner)
        except AuthorizationError as exc:
            logger.warning(
                "Leave decision refused request=%s actor=%s role=%s actor_dept=%s owner_dept=%s (%s)",
                request_id, actor.user_id, getattr(actor.role, "value", actor.role), actor.dept_id,
                owner.dept_id, exc.code,
            )
            raise

        if request.status != RequestStatus.PENDING:
            raise AlreadyDecidedError(f"Leave request {request_id} is already {request.status.value}")

        status = decision.resulting_status
        decided = self._leaves.decide_leave(
            request_id=request.request_id,
            status=status,
            approved_by=actor.user_id,
            approved_at=now,
        )
        if not decided:
            raise AlreadyDecidedError(f"Leave request {request_id} was decided concurrently")

        logger.info("Leave request #%s %s by user=%s", request_id, status.value, actor.user_id)
        return replace(request, status=status, approved_by=actor.user_id, approved_at=now)

    def remaining_allowance(self, user_id: int, year: int) -> int:
        """Annual quota minus approved annual-leave days starting in ``year``.

        Not clamped: over-approval shows up as a negative number.
        """
        approved = self._leaves.list_requests(user_id=int(user_id), status=RequestStatus.APPROVED)
        used = sum(
            r.duration_days
            for r in approved
            if r.leave_type == LeaveType.ANNUAL and r.start_date.year == int(year)
        )
        return self._policy.annual_leave_quota - used

    def list_for_user(self, user_id: int) -> Sequence[LeaveRequestRow]:
        return self._leaves.list_requests(user_id=int(user_id), limit=DEFAULT_PENDING_LIMIT)

    def list_pending(self, actor: Actor) -> Sequence[LeaveRequestRow]:
        scope = self._scope.query_filter(actor)
        if scope.deny_all:
            return []
        return self._leaves.list_requests(
            status=RequestStatus.PENDING,
            user_id=scope.user_id,
            dept_id=scope.dept_id,
            exclude_user_id=scope.exclude_user_id,
            limit=DEFAULT_PENDING_LIMIT,
        )

    @staticmethod
    def leave_type_label(leave_type: LeaveType) -> str:
        return LEAVE_TYPE_LABELS.get(leave_type, leave_type.value)

    @staticmethod
    def status_label(status: RequestStatus) -> str:
        return REQUEST_STATUS_LABELS.get(status, status.value)
