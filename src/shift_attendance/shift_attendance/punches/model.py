from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import PunchDirection


@dataclass(frozen=True, order=True)
class PunchEvent:
    """Raw biometric punch. ``instant`` is timezone-aware."""

    instant: datetime
    direction: PunchDirection
    employee_number: str = ""

    @property
    def is_in(self) -> bool:
        return self.direction == PunchDirection.IN

    @property
    def is_out(self) -> bool:
        return self.direction == PunchDirection.OUT
