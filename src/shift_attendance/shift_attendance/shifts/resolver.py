from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..core.enums import SourcePriority
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..rosters.model import RosterAssignment
from ..rosters.repository import RosterRepository
from .model import CandidateSet, ShiftCandidate, filter_by_gender, normalize_shift_configs
from .repository import ShiftConfigRepository, ShiftRepository

logger = logging.getLogger(__name__)


class ShiftCandidateResolver:
    """Builds the candidate shift set for an employee on a date.

    Priority: roster → designation → department → division baseline → all active.
    The first tier that contributes a shift id keeps it.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        configs: ShiftConfigRepository,
        rosters: RosterRepository,
    ):
        self._employees = employees
        self._shifts = shifts
        self._configs = configs
        self._rosters = rosters

    def resolve(
        self,
        employee_number: str,
        work_date: date,
        *,
        roster: Optional[RosterAssignment] = None,
        employee: Optional[Employee] = None,
    ) -> CandidateSet:
        employee = employee or self._employees.get_by_number(employee_number)
        if not employee:
            return CandidateSet()

        if employee.division_id is None:
            logger.warning("Employee %s has no division assigned", employee.employee_number)

        if roster is None:
            roster = self._rosters.get_for_employee_and_date(
                employee_number=employee.employee_number, work_date=work_date
            )

        found: dict[int, ShiftCandidate] = {}
        roster_shift_id: Optional[int] = None

        if roster and roster.shift_id is not None:
            shift = self._shifts.get_by_id(roster.shift_id)
            if shift:
                roster_shift_id = shift.shift_id
                found[shift.shift_id] = ShiftCandidate(shift=shift, source_priority=SourcePriority.ROSTER)

        self._add(found, self._designation_shift_ids(employee), SourcePriority.DESIGNATION)
        self._add(found, self._department_shift_ids(employee), SourcePriority.DEPARTMENT)

        if not found and employee.division_id is not None:
            raw = self._configs.get_configs(scope="division", owner_id=employee.division_id)
            self._add(found, filter_by_gender(normalize_shift_configs(raw), employee.gender), SourcePriority.DIVISION)

        if not found:
            for shift in self._shifts.list_active():
                found.setdefault(shift.shift_id, ShiftCandidate(shift=shift, source_priority=SourcePriority.GLOBAL))

        return CandidateSet(
            candidates=tuple(found.values()),
            source="pre_scheduled" if roster_shift_id is not None else "organizational",
            roster_shift_id=roster_shift_id,
        )

    def _designation_shift_ids(self, employee: Employee) -> list[int]:
        if employee.designation_id is None:
            return []
        division_id, department_id = employee.division_id, employee.department_id

        if division_id is not None and department_id is not None:
            ids = self._filtered(
                "designation", employee.designation_id, employee.gender,
                division_id=division_id, department_id=department_id,
            )
            if ids:
                return ids

        if division_id is not None:
            return self._filtered("designation", employee.designation_id, employee.gender, division_id=division_id)

        return self._filtered("designation", employee.designation_id, employee.gender)

    def _department_shift_ids(self, employee: Employee) -> list[int]:
        if employee.department_id is None:
            return []
        if employee.division_id is not None:
            return self._filtered("department", employee.department_id, employee.gender, division_id=employee.division_id)
        return self._filtered("department", employee.department_id, employee.gender)

    def _filtered(self, scope: str, owner_id: int, gender: Optional[str], **context) -> list[int]:
        raw = self._configs.get_configs(scope=scope, owner_id=owner_id, **context)
        return filter_by_gender(normalize_shift_configs(raw), gender)

    def _add(self, found: dict[int, ShiftCandidate], shift_ids: list[int], priority: SourcePriority) -> None:
        if not shift_ids:
            return
        for shift in self._shifts.get_active_by_ids(shift_ids):
            if shift.shift_id not in found:
                found[shift.shift_id] = ShiftCandidate(shift=shift, source_priority=priority)
