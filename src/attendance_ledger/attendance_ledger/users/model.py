from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Employee as seen by the ledger (read only, owned by user management)."""

    user_id: int
    full_name: str
    username: str
    employee_code: str
    role: Role
    dept_id: Optional[int]
    is_active: bool = True
