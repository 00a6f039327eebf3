from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"

    def __init__(self, message: str = "", **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        out = {"error": self.code, "message": self.message}
        out.update(self.details)
        return out


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class InvalidOrderError(ValidationError):
    """Check-out at or before check-in."""

    code = "invalid_order"


class ConflictError(DomainError):
    code = "conflict"


class DuplicateCheckInError(ConflictError):
    """A record already exists for this user and day; carries it."""

    code = "duplicate_check_in"

    def __init__(self, existing: Any):
        at = existing.check_in_time.strftime("%H:%M") if existing.check_in_time else "-"
        super().__init__(f"Already checked in today at {at}", existing_id=existing.attendance_id)
        self.existing = existing


class OverlappingLeaveError(ConflictError):
    code = "overlapping_leave"

    def __init__(self, conflicting: Any):
        super().__init__(
            f"Leave overlaps request #{conflicting.request_id} "
            f"({conflicting.start_date.isoformat()} to {conflicting.end_date.isoformat()})",
            conflicting_id=conflicting.request_id,
        )
        self.conflicting = conflicting


class AlreadyCheckedOutError(ConflictError):
    code = "already_checked_out"


class AlreadyDecidedError(ConflictError):
    code = "already_decided"


class NotCheckedInError(ConflictError):
    code = "not_checked_in"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"


def _dept(dept_id: Optional[int]) -> str:
    return "(none)" if dept_id is None else str(dept_id)


class ForbiddenDepartmentError(AuthorizationError):
    code = "forbidden_department"

    def __init__(self, actor_dept_id: Optional[int], target_dept_id: Optional[int]):
        super().__init__(
            f"Manager of department {_dept(actor_dept_id)} cannot act on department {_dept(target_dept_id)}",
            actor_dept_id=actor_dept_id,
            target_dept_id=target_dept_id,
        )


class NotFoundError(DomainError):
    code = "not_found"


class StorageError(DomainError):
    """Infrastructure failure talking to the relational store."""

    code = "storage_error"
