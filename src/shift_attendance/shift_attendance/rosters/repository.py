from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import RosterAssignment


class RosterRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_number: str, work_date: date) -> Optional[RosterAssignment]:
        raise NotImplementedError

    def record_actual_shift(self, *, roster_id: int, actual_shift_id: Optional[int], is_deviation: bool) -> bool:
        """Write back the detected shift and whether it differs from the schedule.

        ``actual_shift_id=None`` clears an earlier write-back.
        """

        raise NotImplementedError
