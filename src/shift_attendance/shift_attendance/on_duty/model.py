from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import OnDutyType


@dataclass(frozen=True)
class OnDutyInterval:
    """Approved on-duty (OD) time counted as worked without punches."""

    od_id: int
    employee_number: str
    work_date: date
    od_type: OnDutyType = OnDutyType.FULL_DAY
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_hours: float = 0.0

    @property
    def is_hour_based(self) -> bool:
        return self.od_type == OnDutyType.HOURS and bool(self.start_time) and bool(self.end_time)
