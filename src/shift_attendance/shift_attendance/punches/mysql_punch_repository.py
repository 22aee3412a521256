from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import PunchDirection
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_datetime, to_db_datetime
from .model import PunchEvent
from .repository import PunchRepository


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_between(self, *, employee_number: str, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_number, punch_time, direction
                FROM punches
                WHERE employee_number=%s AND punch_time >= %s AND punch_time < %s
                ORDER BY punch_time
                """,
                (employee_number.upper(), to_db_datetime(start), to_db_datetime(end)),
            )
            return [
                PunchEvent(
                    instant=from_db_datetime(r["punch_time"]),
                    direction=PunchDirection(r["direction"]),
                    employee_number=r["employee_number"],
                )
                for r in fetchall(cur)
            ]
