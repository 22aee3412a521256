from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import OnDutyInterval


class OnDutyRepository(Protocol):
    def list_approved(self, *, employee_number: str, work_date: date) -> Sequence[OnDutyInterval]:
        raise NotImplementedError
