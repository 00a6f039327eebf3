from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ForbiddenDepartmentError


@dataclass(frozen=True)
class Actor:
    """Explicit caller context passed into every scoped operation."""

    user_id: int
    role: Role
    dept_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(user_id=user.user_id, role=user.role, dept_id=user.dept_id)


@dataclass(frozen=True)
class ScopeFilter:
    """Same narrowing as the predicate, expressed as repository query args."""

    dept_id: Optional[int] = None
    user_id: Optional[int] = None
    exclude_user_id: Optional[int] = None
    deny_all: bool = False


ScopePredicate = Callable[[Any], bool]


class ScopeResolver:
    """Decides which rows an actor may see or act upon.

    Rows are anything exposing ``user_id`` and ``dept_id``. Roles outside the
    closed set raise instead of falling through to "allow".
    """

    def scope_for(self, actor: Actor) -> ScopePredicate:
        role = self._role_of(actor)
        if role is Role.ADMIN:
            return lambda row: True
        if role is Role.MANAGER:
            # A manager without a department sees nothing.
            if actor.dept_id is None:
                return lambda row: False
            return lambda row: row.dept_id == actor.dept_id and row.user_id != actor.user_id
        if role is Role.EMPLOYEE:
            return lambda row: row.user_id == actor.user_id
        raise AuthorizationError(f"Unknown role: {actor.role!r}")

    def query_filter(self, actor: Actor) -> ScopeFilter:
        role = self._role_of(actor)
        if role is Role.ADMIN:
            return ScopeFilter()
        if role is Role.MANAGER:
            if actor.dept_id is None:
                return ScopeFilter(deny_all=True)
            return ScopeFilter(dept_id=actor.dept_id, exclude_user_id=actor.user_id)
        if role is Role.EMPLOYEE:
            return ScopeFilter(user_id=actor.user_id)
        raise AuthorizationError(f"Unknown role: {actor.role!r}")

    def ensure_can_decide(self, actor: Actor, row) -> None:
        """Raise unless ``actor`` may approve/reject something owned by ``row``."""
        role = self._role_of(actor)
        if role is Role.EMPLOYEE:
            raise AuthorizationError("Employees cannot decide leave requests")
        if self.scope_for(actor)(row):
            return
        if row.user_id == actor.user_id:
            raise AuthorizationError("Managers cannot decide their own requests")
        raise ForbiddenDepartmentError(actor.dept_id, row.dept_id)

    @staticmethod
    def _role_of(actor: Actor) -> Role:
        try:
            return Role(actor.role)
        except ValueError:
            raise AuthorizationError(f"Unknown role: {actor.role!r}")
