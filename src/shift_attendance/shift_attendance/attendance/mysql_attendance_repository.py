from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional

from ..core.enums import DayStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, load_json, to_db_datetime
from .model import DailyAttendance, ShiftSegment
from .repository import DailyAttendanceRepository


class MySQLDailyAttendanceRepository(DailyAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_number: str, work_date: date) -> Optional[DailyAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_number, work_date, status, segments_json,
                       total_working_hours, total_ot_hours, total_extra_hours, total_od_hours,
                       total_late_minutes, total_early_minutes, total_expected_hours,
                       payable_shifts, first_in, last_out, notes
                FROM attendance_daily
                WHERE employee_number=%s AND work_date=%s
                """,
                (employee_number.upper(), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return DailyAttendance(
                employee_number=r["employee_number"],
                work_date=r["work_date"],
                status=DayStatus(r["status"]),
                segments=tuple(ShiftSegment.from_dict(s) for s in load_json(r.get("segments_json"), [])),
                working_hours=float(r.get("total_working_hours") or 0),
                ot_hours=float(r.get("total_ot_hours") or 0),
                extra_hours=float(r.get("total_extra_hours") or 0),
                od_hours=float(r.get("total_od_hours") or 0),
                late_minutes=float(r.get("total_late_minutes") or 0),
                early_minutes=float(r.get("total_early_minutes") or 0),
                expected_hours=float(r.get("total_expected_hours") or 0),
                payable_shifts=float(r.get("payable_shifts") or 0),
                first_in=from_db_datetime(r.get("first_in")),
                last_out=from_db_datetime(r.get("last_out")),
                notes=r.get("notes"),
            )

    def upsert(self, record: DailyAttendance, *, synced_at: datetime) -> None:
        segments_json = json.dumps([s.to_dict() for s in record.segments])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_daily(
                    employee_number, work_date, status, segments_json,
                    total_working_hours, total_ot_hours, total_extra_hours, total_od_hours,
                    total_late_minutes, total_early_minutes, total_expected_hours,
                    payable_shifts, first_in, last_out, notes, last_synced_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    segments_json=VALUES(segments_json),
                    total_working_hours=VALUES(total_working_hours),
                    total_ot_hours=VALUES(total_ot_hours),
                    total_extra_hours=VALUES(total_extra_hours),
                    total_od_hours=VALUES(total_od_hours),
                    total_late_minutes=VALUES(total_late_minutes),
                    total_early_minutes=VALUES(total_early_minutes),
                    total_expected_hours=VALUES(total_expected_hours),
                    payable_shifts=VALUES(payable_shifts),
                    first_in=VALUES(first_in),
                    last_out=VALUES(last_out),
                    notes=VALUES(notes),
                    last_synced_at=VALUES(last_synced_at)
                """,
                (
                    record.employee_number.upper(),
                    record.work_date,
                    record.status.value,
                    segments_json,
                    record.working_hours,
                    record.ot_hours,
                    record.extra_hours,
                    record.od_hours,
                    record.late_minutes,
                    record.early_minutes,
                    record.expected_hours,
                    record.payable_shifts,
                    to_db_datetime(record.first_in),
                    to_db_datetime(record.last_out),
                    record.notes,
                    to_db_datetime(synced_at),
                ),
            )
