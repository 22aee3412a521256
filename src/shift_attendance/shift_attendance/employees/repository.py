from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_number(self, employee_number: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_numbers(self) -> Sequence[str]:
        raise NotImplementedError
