from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_number(self, employee_number: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_number, full_name, gender, division_id, department_id, designation_id, is_active
                FROM employees
                WHERE employee_number=%s
                """,
                (employee_number.upper(),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_number=r["employee_number"],
                full_name=r["full_name"],
                gender=r.get("gender"),
                division_id=_opt_int(r.get("division_id")),
                department_id=_opt_int(r.get("department_id")),
                designation_id=_opt_int(r.get("designation_id")),
                is_active=bool(r.get("is_active", 1)),
            )

    def list_active_numbers(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_number FROM employees WHERE is_active=1 ORDER BY employee_number")
            return [r["employee_number"] for r in fetchall(cur)]
