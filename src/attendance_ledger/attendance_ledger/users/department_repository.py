from __future__ import annotations

from typing import Optional, Protocol

from .department_model import Department


class DepartmentRepository(Protocol):
    def get_by_id(self, dept_id: int) -> Optional[Department]:
        raise NotImplementedError
