from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import DayType


@dataclass(frozen=True)
class RosterAssignment:
    """Pre-scheduled shift for one employee on one date."""

    roster_id: int
    employee_number: str
    work_date: date
    shift_id: Optional[int]
    day_type: DayType = DayType.NORMAL
    actual_shift_id: Optional[int] = None
    is_deviation: bool = False

    def deviates_from(self, detected_shift_id: int) -> bool:
        return self.shift_id is not None and int(self.shift_id) != int(detected_shift_id)
