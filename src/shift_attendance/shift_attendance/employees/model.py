from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee with the organizational links shift resolution needs."""

    employee_number: str
    full_name: str
    gender: Optional[str] = None
    division_id: Optional[int] = None
    department_id: Optional[int] = None
    designation_id: Optional[int] = None
    is_active: bool = True
