from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from src.shift_attendance.shift_attendance.attendance.model import ConfusedShiftRecord, DailyAttendance
from src.shift_attendance.shift_attendance.attendance.service import AttendanceProcessingService
from src.shift_attendance.shift_attendance.core.enums import ConfusedStatus, PunchDirection
from src.shift_attendance.shift_attendance.employees.model import Employee
from src.shift_attendance.shift_attendance.on_duty.model import OnDutyInterval
from src.shift_attendance.shift_attendance.punches.model import PunchEvent
from src.shift_attendance.shift_attendance.rosters.model import RosterAssignment
from src.shift_attendance.shift_attendance.settings.model import GraceOverrides
from src.shift_attendance.shift_attendance.shifts.model import ShiftConfigEntry, ShiftDefinition
from src.shift_attendance.shift_attendance.shifts.resolver import ShiftCandidateResolver

IST = timezone(timedelta(hours=5, minutes=30))


@pytest.fixture
def ist() -> timezone:
    return IST


@pytest.fixture
def at():
    """``at("2024-03-01", "09:10")`` -> aware datetime in IST."""

    def _at(day: str, hhmm: str) -> datetime:
        return datetime.fromisoformat(f"{day}T{hhmm}:00").replace(tzinfo=IST)

    return _at


@dataclass
class InMemoryEmployees:
    employees: dict[str, Employee] = field(default_factory=dict)

    def get_by_number(self, employee_number: str) -> Optional[Employee]:
        return self.employees.get(employee_number.upper())

    def list_active_numbers(self):
        return sorted(n for n, e in self.employees.items() if e.is_active)


@dataclass
class InMemoryShifts:
    shifts: dict[int, ShiftDefinition] = field(default_factory=dict)

    def list_active(self):
        return [s for s in self.shifts.values() if s.is_active]

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        return self.shifts.get(shift_id)

    def get_active_by_ids(self, shift_ids):
        wanted = set(shift_ids)
        return [s for s in self.shifts.values() if s.shift_id in wanted and s.is_active]


@dataclass
class InMemoryShiftConfigs:
    # (scope, owner_id, division_id, department_id) -> entries
    configs: dict[tuple, list] = field(default_factory=dict)

    def get_configs(self, *, scope, owner_id, division_id=None, department_id=None):
        return self.configs.get((scope, owner_id, division_id, department_id), [])


@dataclass
class InMemoryRosters:
    rosters: dict[tuple[str, date], RosterAssignment] = field(default_factory=dict)
    write_backs: list[tuple[int, Optional[int], bool]] = field(default_factory=list)

    def get_for_employee_and_date(self, *, employee_number: str, work_date: date):
        return self.rosters.get((employee_number.upper(), work_date))

    def record_actual_shift(self, *, roster_id: int, actual_shift_id: Optional[int], is_deviation: bool) -> bool:
        self.write_backs.append((roster_id, actual_shift_id, is_deviation))
        for key, r in self.rosters.items():
            if r.roster_id == roster_id:
                self.rosters[key] = replace(r, actual_shift_id=actual_shift_id, is_deviation=is_deviation)
                return True
        return False


@dataclass
class InMemoryPunches:
    punches: list[PunchEvent] = field(default_factory=list)

    def add(self, employee_number: str, instant: datetime, direction: str) -> None:
        self.punches.append(PunchEvent(instant=instant, direction=PunchDirection(direction), employee_number=employee_number))

    def list_between(self, *, employee_number: str, start: datetime, end: datetime):
        return sorted(
            (p for p in self.punches if p.employee_number == employee_number and start <= p.instant < end),
            key=lambda p: p.instant,
        )


@dataclass
class InMemoryOnDuty:
    items: list[OnDutyInterval] = field(default_factory=list)

    def list_approved(self, *, employee_number: str, work_date: date):
        return [o for o in self.items if o.employee_number == employee_number and o.work_date == work_date]


@dataclass
class InMemorySettings:
    grace: GraceOverrides = field(default_factory=GraceOverrides)

    def get_grace_overrides(self) -> GraceOverrides:
        return self.grace


@dataclass
class InMemoryDaily:
    records: dict[tuple[str, date], DailyAttendance] = field(default_factory=dict)
    writes: int = 0

    def get(self, *, employee_number: str, work_date: date):
        return self.records.get((employee_number, work_date))

    def upsert(self, record: DailyAttendance, *, synced_at: datetime) -> None:
        self.writes += 1
        self.records[(record.employee_number, record.work_date)] = record


class InMemoryConfused:
    def __init__(self):
        self.records: dict[int, ConfusedShiftRecord] = {}
        self._next_id = 0

    def upsert_pending(self, record: ConfusedShiftRecord) -> None:
        for cid, existing in self.records.items():
            same_key = (
                existing.employee_number == record.employee_number
                and existing.work_date == record.work_date
                and existing.in_time == record.in_time
            )
            if same_key:
                if existing.is_pending:
                    self.records[cid] = replace(existing, out_time=record.out_time, candidates=record.candidates)
                return
        self._next_id += 1
        self.records[self._next_id] = replace(record, confused_id=self._next_id)

    def get_by_id(self, confused_id: int):
        return self.records.get(confused_id)

    def list_for_day(self, *, employee_number: str, work_date: date):
        return [r for r in self.records.values() if r.employee_number == employee_number and r.work_date == work_date]

    def list_records(self, *, status=None, employee_number=None, start_date=None, end_date=None):
        out = list(self.records.values())
        if status is not None:
            out = [r for r in out if r.status == status]
        if employee_number:
            out = [r for r in out if r.employee_number == employee_number]
        if start_date is not None:
            out = [r for r in out if r.work_date >= start_date]
        if end_date is not None:
            out = [r for r in out if r.work_date <= end_date]
        return out

    def mark_resolved(self, *, confused_id, shift_id, reviewed_by, reviewed_at, comments=None) -> bool:
        rec = self.records.get(confused_id)
        if not rec:
            return False
        self.records[confused_id] = replace(
            rec,
            status=ConfusedStatus.RESOLVED,
            assigned_shift_id=shift_id,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            review_comments=comments,
        )
        return True


@dataclass
class World:
    """Every store the engine reads or writes, kept in memory."""

    employees: InMemoryEmployees = field(default_factory=InMemoryEmployees)
    shifts: InMemoryShifts = field(default_factory=InMemoryShifts)
    configs: InMemoryShiftConfigs = field(default_factory=InMemoryShiftConfigs)
    rosters: InMemoryRosters = field(default_factory=InMemoryRosters)
    punches: InMemoryPunches = field(default_factory=InMemoryPunches)
    on_duty: InMemoryOnDuty = field(default_factory=InMemoryOnDuty)
    settings: InMemorySettings = field(default_factory=InMemorySettings)
    daily: InMemoryDaily = field(default_factory=InMemoryDaily)
    confused: InMemoryConfused = field(default_factory=InMemoryConfused)

    def add_shift(self, shift_id: int, name: str, start: str, end: str, **kw) -> ShiftDefinition:
        shift = ShiftDefinition(shift_id=shift_id, name=name, start_time=start, end_time=end, **kw)
        self.shifts.shifts[shift_id] = shift
        return shift

    def add_employee(self, number: str = "EMP001", **kw) -> Employee:
        emp = Employee(employee_number=number, full_name=kw.pop("full_name", number), **kw)
        self.employees.employees[number] = emp
        return emp

    def allow(self, scope: str, owner_id: int, *shift_ids: int, division_id=None, department_id=None, gender=None):
        entries = [ShiftConfigEntry(shift_id=s, gender=gender) for s in shift_ids]
        self.configs.configs.setdefault((scope, owner_id, division_id, department_id), []).extend(entries)

    def roster(self, number: str, day: date, shift_id, **kw) -> RosterAssignment:
        roster_id = len(self.rosters.rosters) + 1
        r = RosterAssignment(roster_id=roster_id, employee_number=number, work_date=day, shift_id=shift_id, **kw)
        self.rosters.rosters[(number, day)] = r
        return r

    def resolver(self) -> ShiftCandidateResolver:
        return ShiftCandidateResolver(self.employees, self.shifts, self.configs, self.rosters)

    def service(self, **kw) -> AttendanceProcessingService:
        return AttendanceProcessingService(
            employees=self.employees,
            shifts=self.shifts,
            rosters=self.rosters,
            punches=self.punches,
            on_duty=self.on_duty,
            settings=self.settings,
            daily=self.daily,
            confused=self.confused,
            resolver=self.resolver(),
            tz=IST,
            clock=lambda: datetime(2024, 3, 10, tzinfo=timezone.utc),
            **kw,
        )


@pytest.fixture
def world() -> World:
    return World()
