from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.formatting import format_duration, format_time, status_label
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedOutError,
    DuplicateCheckInError,
    InvalidOrderError,
    NotCheckedInError,
    NotFoundError,
    ValidationError,
)
from ..core.policy import AttendancePolicy
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, WorkingDuration
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceRowUI:
    date: str
    check_in: str
    check_out: str
    duration: str
    status: str
    location: str


def working_duration(record) -> Optional[WorkingDuration]:
    """Elapsed time between check-in and check-out, floored to whole minutes.

    ``None`` while the record is still open.
    """
    if record.check_out_time is None:
        return None
    seconds = (record.check_out_time - record.check_in_time).total_seconds()
    return WorkingDuration(total_minutes=max(int(seconds // 60), 0))


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        policy: AttendancePolicy | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._users = users
        self._policy = policy or AttendancePolicy()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def check_in(self, user_id: int, *, now: datetime | None = None, location: str | None = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} does not exist")
        if not user.is_active:
            raise ValidationError(f"User {user_id} is inactive")

        existing = self._attendance.get_for_user_and_date(user_id, today)
        if existing:
            exc = DuplicateCheckInError(existing)
            logger.warning("Rejected check-in user=%s date=%s (%s)", user_id, today, exc.code)
            raise exc

        strategy = self._factory.for_checkin(now=now, policy=self._policy)
        decision = strategy.decide_checkin(now=now, policy=self._policy)
        location = (location or "").strip() or None

        attendance_id = self._attendance.create_checkin(
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            status=decision.status,
            location=location,
            note=decision.note,
        )
        logger.info("Check-in user=%s at %s status=%s", user_id, now.isoformat(), decision.status.value)
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            status=decision.status,
            location=location,
            note=decision.note,
        )

    def check_out(self, record_id: int | None, user_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        """Close a record. ``record_id=None`` means today's record for ``user_id``."""
        now = now or now_local()

        if record_id is None:
            record = self._attendance.get_for_user_and_date(user_id, now.date())
            if not record:
                raise NotCheckedInError("No check-in found for today")
        else:
            record = self._attendance.get_by_id(record_id)
            if not record or record.user_id != user_id:
                raise NotFoundError(f"Attendance record {record_id} not found")

        if record.check_out_time is not None:
            raise AlreadyCheckedOutError(f"Already checked out at {format_time(record.check_out_time)}")
        if now <= record.check_in_time:
            raise InvalidOrderError("Check-out must be after check-in")

        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            user_id=user_id,
            check_out_time=now,
        )
        if not updated:
            # A concurrent check-out won the conditional update.
            raise AlreadyCheckedOutError("Already checked out")

        logger.info("Check-out user=%s record=%s at %s", user_id, record.attendance_id, now.isoformat())
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            check_in_time=record.check_in_time,
            check_out_time=now,
            status=record.status,
            location=record.location,
            note=record.note,
        )

    @staticmethod
    def working_duration(record) -> Optional[WorkingDuration]:
        return working_duration(record)

    def get_history_ui(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRowUI]:
        rows = self._attendance.get_recent_for_user(user_id, limit)
        return [self._to_ui(r) for r in rows]

    def get_today_record(self, user_id: int, today: date) -> Optional[AttendanceRecord]:
        """Get today's attendance record for a user"""
        return self._attendance.get_for_user_and_date(user_id, today)

    def _to_ui(self, r: AttendanceRecord) -> AttendanceRowUI:
        duration = working_duration(r)
        return AttendanceRowUI(
            date=r.work_date.strftime("%Y-%m-%d"),
            check_in=format_time(r.check_in_time),
            check_out=format_time(r.check_out_time),
            duration=format_duration(duration.total_minutes if duration else None),
            status=status_label(AttendanceStatus(r.status)),
            location=r.location or "-",
        )
