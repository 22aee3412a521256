from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ConfusedStatus
from .model import ConfusedShiftRecord, DailyAttendance


class DailyAttendanceRepository(Protocol):
    def get(self, *, employee_number: str, work_date: date) -> Optional[DailyAttendance]:
        raise NotImplementedError

    def upsert(self, record: DailyAttendance, *, synced_at: datetime) -> None:
        """Insert or replace the aggregate for (employee, date)."""

        raise NotImplementedError


class ConfusedShiftRepository(Protocol):
    def upsert_pending(self, record: ConfusedShiftRecord) -> None:
        """Keyed on (employee, date, in_time). Resolved rows are left alone."""

        raise NotImplementedError

    def get_by_id(self, confused_id: int) -> Optional[ConfusedShiftRecord]:
        raise NotImplementedError

    def list_for_day(self, *, employee_number: str, work_date: date) -> Sequence[ConfusedShiftRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        status: Optional[ConfusedStatus] = None,
        employee_number: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[ConfusedShiftRecord]:
        raise NotImplementedError

    def mark_resolved(
        self,
        *,
        confused_id: int,
        shift_id: int,
        reviewed_by: Optional[str],
        reviewed_at: datetime,
        comments: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
