from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Read-only lookups; services depend on this interface, not on MySQL."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError
