from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import GraceOverrides
from .repository import SettingsRepository


def _opt_float(value) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    return float(value)


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_grace_overrides(self) -> GraceOverrides:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT setting_key, setting_value
                FROM settings
                WHERE setting_key IN ('late_in_grace_time', 'early_out_grace_time')
                """
            )
            values = {r["setting_key"]: r["setting_value"] for r in fetchall(cur)}
        return GraceOverrides(
            late_in_grace=_opt_float(values.get("late_in_grace_time")),
            early_out_grace=_opt_float(values.get("early_out_grace_time")),
        )
