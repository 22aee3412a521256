from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ShiftConfigEntry, ShiftDefinition, normalize_duration_hours
from .repository import ShiftConfigRepository, ShiftRepository

_SHIFT_COLUMNS = "shift_id, shift_name, start_time, end_time, duration, grace_period, payable_value, is_active"


def _to_shift(r: dict) -> ShiftDefinition:
    return ShiftDefinition(
        shift_id=int(r["shift_id"]),
        name=r["shift_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        expected_hours=normalize_duration_hours(r.get("duration")),
        grace_period=int(r["grace_period"]) if r.get("grace_period") is not None else 15,
        payable_value=float(r["payable_value"]) if r.get("payable_value") is not None else 1.0,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[ShiftDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE is_active=1 ORDER BY shift_id")
            return [_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def get_active_by_ids(self, shift_ids: Iterable[int]) -> Sequence[ShiftDefinition]:
        ids = [int(i) for i in shift_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE is_active=1 AND shift_id IN ({placeholders}) ORDER BY shift_id",
                tuple(ids),
            )
            return [_to_shift(r) for r in fetchall(cur)]


class MySQLShiftConfigRepository(ShiftConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_configs(
        self,
        *,
        scope: str,
        owner_id: int,
        division_id: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> Sequence[ShiftConfigEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_id, gender, is_legacy
                FROM org_shift_configs
                WHERE scope=%s AND owner_id=%s
                  AND division_id <=> %s AND department_id <=> %s
                ORDER BY config_id
                """,
                (scope, int(owner_id), division_id, department_id),
            )
            return [
                ShiftConfigEntry(
                    shift_id=int(r["shift_id"]),
                    gender=r.get("gender"),
                    legacy=bool(r.get("is_legacy")),
                )
                for r in fetchall(cur)
            ]
