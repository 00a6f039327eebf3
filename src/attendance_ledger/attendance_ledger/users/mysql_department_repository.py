from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .department_model import Department
from .department_repository import DepartmentRepository


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT dept_id, dept_name FROM departments WHERE dept_id=%s", (int(dept_id),))
            r = fetchone(cur)
            return Department(dept_id=int(r["dept_id"]), dept_name=r["dept_name"]) if r else None
