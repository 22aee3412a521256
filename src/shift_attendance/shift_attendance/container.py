from __future__ import annotations

from dataclasses import dataclass

from .attendance.locking import InProcessLockProvider, LockProvider, MySQLLockProvider
from .attendance.mysql_attendance_repository import MySQLDailyAttendanceRepository
from .attendance.mysql_confused_shift_repository import MySQLConfusedShiftRepository
from .attendance.service import AttendanceProcessingService
from .common.datetime_utils import parse_utc_offset
from .core.constants import DEFAULT_TOLERANCE_HOURS, DEFAULT_UTC_OFFSET
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .on_duty.mysql_on_duty_repository import MySQLOnDutyRepository
from .punches.mysql_punch_repository import MySQLPunchRepository
from .rosters.mysql_roster_repository import MySQLRosterRepository
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .shifts.mysql_shift_repository import MySQLShiftConfigRepository, MySQLShiftRepository
from .shifts.resolver import ShiftCandidateResolver


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    shifts_repo: MySQLShiftRepository
    shift_configs_repo: MySQLShiftConfigRepository
    rosters_repo: MySQLRosterRepository
    punches_repo: MySQLPunchRepository
    on_duty_repo: MySQLOnDutyRepository
    settings_repo: MySQLSettingsRepository
    daily_repo: MySQLDailyAttendanceRepository
    confused_repo: MySQLConfusedShiftRepository

    resolver: ShiftCandidateResolver
    attendance_service: AttendanceProcessingService


def build_container(
    *,
    db_config: dict,
    utc_offset: str = DEFAULT_UTC_OFFSET,
    tolerance_hours: float = DEFAULT_TOLERANCE_HOURS,
    max_workers: int = 4,
    lock_timeout_seconds: float = 30.0,
    lock_backend: str = "process",
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    shift_configs_repo = MySQLShiftConfigRepository(conn)
    rosters_repo = MySQLRosterRepository(conn)
    punches_repo = MySQLPunchRepository(conn)
    on_duty_repo = MySQLOnDutyRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)
    daily_repo = MySQLDailyAttendanceRepository(conn)
    confused_repo = MySQLConfusedShiftRepository(conn)

    locks: LockProvider
    if lock_backend == "mysql":
        locks = MySQLLockProvider(conn, timeout_seconds=lock_timeout_seconds)
    else:
        locks = InProcessLockProvider(timeout_seconds=lock_timeout_seconds)

    resolver = ShiftCandidateResolver(employees_repo, shifts_repo, shift_configs_repo, rosters_repo)
    attendance_service = AttendanceProcessingService(
        employees=employees_repo,
        shifts=shifts_repo,
        rosters=rosters_repo,
        punches=punches_repo,
        on_duty=on_duty_repo,
        settings=settings_repo,
        daily=daily_repo,
        confused=confused_repo,
        resolver=resolver,
        locks=locks,
        tz=parse_utc_offset(utc_offset),
        tolerance_hours=tolerance_hours,
        max_workers=max_workers,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        shift_configs_repo=shift_configs_repo,
        rosters_repo=rosters_repo,
        punches_repo=punches_repo,
        on_duty_repo=on_duty_repo,
        settings_repo=settings_repo,
        daily_repo=daily_repo,
        confused_repo=confused_repo,
        resolver=resolver,
        attendance_service=attendance_service,
    )
