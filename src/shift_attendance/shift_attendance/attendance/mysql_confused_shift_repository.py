from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import ConfusedStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, load_json, to_db_datetime
from .model import CandidateSummary, ConfusedShiftRecord
from .repository import ConfusedShiftRepository

_COLUMNS = """
    confused_id, employee_number, work_date, in_time, out_time, candidates_json,
    status, assigned_shift_id, reviewed_by, reviewed_at, review_comments
"""


def _to_record(r: Dict[str, Any]) -> ConfusedShiftRecord:
    return ConfusedShiftRecord(
        confused_id=int(r["confused_id"]),
        employee_number=r["employee_number"],
        work_date=r["work_date"],
        in_time=from_db_datetime(r["in_time"]),
        out_time=from_db_datetime(r.get("out_time")),
        candidates=tuple(CandidateSummary.from_dict(c) for c in load_json(r.get("candidates_json"), [])),
        status=ConfusedStatus(r["status"]),
        assigned_shift_id=int(r["assigned_shift_id"]) if r.get("assigned_shift_id") is not None else None,
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=from_db_datetime(r.get("reviewed_at")),
        review_comments=r.get("review_comments"),
    )


class MySQLConfusedShiftRepository(ConfusedShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_pending(self, record: ConfusedShiftRecord) -> None:
        candidates_json = json.dumps([c.to_dict() for c in record.candidates])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO confused_shifts(employee_number, work_date, in_time, out_time, candidates_json, status)
                VALUES(%s,%s,%s,%s,%s,'pending')
                ON DUPLICATE KEY UPDATE
                    out_time=IF(status='pending', VALUES(out_time), out_time),
                    candidates_json=IF(status='pending', VALUES(candidates_json), candidates_json)
                """,
                (
                    record.employee_number.upper(),
                    record.work_date,
                    to_db_datetime(record.in_time),
                    to_db_datetime(record.out_time),
                    candidates_json,
                ),
            )

    def get_by_id(self, confused_id: int) -> Optional[ConfusedShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM confused_shifts WHERE confused_id=%s", (int(confused_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_day(self, *, employee_number: str, work_date: date) -> Sequence[ConfusedShiftRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM confused_shifts
                WHERE employee_number=%s AND work_date=%s
                ORDER BY in_time
                """,
                (employee_number.upper(), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_records(
        self,
        *,
        status: Optional[ConfusedStatus] = None,
        employee_number: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ConfusedShiftRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if employee_number:
            clauses.append("employee_number=%s")
            params.append(employee_number.upper())
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM confused_shifts WHERE {where} ORDER BY work_date DESC, in_time ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_resolved(
        self,
        *,
        confused_id: int,
        shift_id: int,
        reviewed_by: Optional[str],
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE confused_shifts
                SET status='resolved', assigned_shift_id=%s, reviewed_by=%s, reviewed_at=%s, review_comments=%s
                WHERE confused_id=%s
                """,
                (int(shift_id), reviewed_by, to_db_datetime(reviewed_at), comments, int(confused_id)),
            )
            return cur.rowcount > 0
