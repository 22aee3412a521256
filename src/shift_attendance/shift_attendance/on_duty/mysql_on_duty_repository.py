from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import OnDutyType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import OnDutyInterval
from .repository import OnDutyRepository


class MySQLOnDutyRepository(OnDutyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_approved(self, *, employee_number: str, work_date: date) -> Sequence[OnDutyInterval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT od_id, employee_number, work_date, od_type, start_time, end_time, duration_hours
                FROM on_duty_requests
                WHERE employee_number=%s AND work_date=%s AND status='approved'
                ORDER BY start_time
                """,
                (employee_number.upper(), work_date),
            )
            return [
                OnDutyInterval(
                    od_id=int(r["od_id"]),
                    employee_number=r["employee_number"],
                    work_date=r["work_date"],
                    od_type=OnDutyType(r["od_type"]),
                    start_time=normalize_mysql_time(r.get("start_time")),
                    end_time=normalize_mysql_time(r.get("end_time")),
                    duration_hours=float(r.get("duration_hours") or 0),
                )
                for r in fetchall(cur)
            ]
