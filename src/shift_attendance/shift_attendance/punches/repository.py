from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import PunchEvent


class PunchRepository(Protocol):
    def list_between(self, *, employee_number: str, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        """Punches with ``start <= instant < end``, oldest first."""

        raise NotImplementedError
