from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import DayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import RosterAssignment
from .repository import RosterRepository


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_number: str, work_date: date) -> Optional[RosterAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT roster_id, employee_number, work_date, shift_id, day_type, actual_shift_id, is_deviation
                FROM rosters
                WHERE employee_number=%s AND work_date=%s
                """,
                (employee_number.upper(), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return RosterAssignment(
                roster_id=int(r["roster_id"]),
                employee_number=r["employee_number"],
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
                day_type=DayType(r.get("day_type") or DayType.NORMAL.value),
                actual_shift_id=int(r["actual_shift_id"]) if r.get("actual_shift_id") is not None else None,
                is_deviation=bool(r.get("is_deviation")),
            )

    def record_actual_shift(self, *, roster_id: int, actual_shift_id: Optional[int], is_deviation: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE rosters SET actual_shift_id=%s, is_deviation=%s WHERE roster_id=%s",
                (
                    int(actual_shift_id) if actual_shift_id is not None else None,
                    1 if is_deviation else 0,
                    int(roster_id),
                ),
            )
            return cur.rowcount > 0
