from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from src.shift_attendance.shift_attendance.core.enums import ConfusedStatus, DayStatus, DayType, MatchMethod
from src.shift_attendance.shift_attendance.core.exceptions import NotFoundError, ValidationError

DAY = date(2024, 3, 1)


def _same_start_setup(world, at):
    world.add_shift(1, "General", "09:00", "18:00")
    world.add_shift(2, "Long", "09:00", "18:30")
    world.add_employee("EMP001", designation_id=3)
    world.allow("designation", 3, 1, 2)
    world.punches.add("EMP001", at("2024-03-01", "09:00"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "18:15"), "OUT")


def test_detected_shift_differing_from_roster_is_flagged(world, at):
    world.add_shift(1, "A", "09:00", "18:00")
    world.add_shift(2, "B", "14:00", "23:00")
    world.add_employee("EMP001", designation_id=3)
    world.allow("designation", 3, 2)
    roster = world.roster("EMP001", DAY, 1)
    world.punches.add("EMP001", at("2024-03-01", "14:10"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "23:05"), "OUT")

    outcome = world.service().process_day("emp001", "2024-03-01")

    assert [s.shift_id for s in outcome.attendance.segments] == [2]
    assert world.rosters.write_backs == [(roster.roster_id, 2, True)]
    assert world.daily.get(employee_number="EMP001", work_date=DAY) == outcome.attendance


def test_roster_shift_worked_is_not_a_deviation(world, at):
    world.add_shift(1, "A", "09:00", "18:00")
    world.add_employee("EMP001")
    roster = world.roster("EMP001", DAY, 1)
    world.punches.add("EMP001", at("2024-03-01", "09:02"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "18:01"), "OUT")

    outcome = world.service().process_day("EMP001", DAY)

    assert outcome.attendance.status == DayStatus.PRESENT
    assert world.rosters.write_backs == [(roster.roster_id, 1, False)]


def test_roster_write_back_is_cleared_when_nothing_is_detected_any_more(world, at):
    world.add_shift(1, "A", "09:00", "18:00")
    world.add_employee("EMP001")
    roster = world.roster("EMP001", DAY, 1)
    world.punches.add("EMP001", at("2024-03-01", "09:02"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "18:01"), "OUT")
    service = world.service()
    service.process_day("EMP001", DAY)

    world.punches.punches.clear()
    service.process_day("EMP001", DAY)
    service.process_day("EMP001", DAY)

    assert world.rosters.write_backs == [(roster.roster_id, 1, False), (roster.roster_id, None, False)]
    stored = world.rosters.get_for_employee_and_date(employee_number="EMP001", work_date=DAY)
    assert stored.actual_shift_id is None
    assert not stored.is_deviation


def test_unknown_employee(world):
    with pytest.raises(NotFoundError):
        world.service().process_day("GHOST", DAY)


def test_invalid_date_is_rejected(world):
    world.add_employee("EMP001")

    with pytest.raises(ValidationError):
        world.service().process_day("EMP001", "03/01/2024")


def test_no_shifts_at_all_falls_back_to_roster_day_type(world, at):
    world.add_employee("EMP001")
    world.roster("EMP001", DAY, None, day_type=DayType.HOLIDAY)
    world.punches.add("EMP001", at("2024-03-01", "09:00"), "IN")

    outcome = world.service().process_day("EMP001", DAY)

    assert outcome.attendance.status == DayStatus.HOLIDAY
    assert len(outcome.failures) == 1
    assert outcome.attendance.notes == "Worked on Holiday"


def test_confused_pair_is_recorded_once(world, at):
    _same_start_setup(world, at)
    service = world.service()

    first = service.process_day("EMP001", DAY)
    second = service.process_day("EMP001", DAY)

    assert len(first.confusions) == 1
    assert second.confusions == ()
    assert len(world.confused.records) == 1
    assert first.attendance == second.attendance
    assert world.daily.writes == 2


def test_resolving_a_confused_pair_reprocesses_the_day(world, at):
    _same_start_setup(world, at)
    service = world.service()
    service.process_day("EMP001", DAY)

    outcome = service.resolve_confused_shift(1, 2, reviewed_by="hr", comments="stayed late")

    (segment,) = outcome.attendance.segments
    assert segment.shift_id == 2
    assert segment.match_method == MatchMethod.MANUAL
    record = world.confused.get_by_id(1)
    assert record.status == ConfusedStatus.RESOLVED
    assert record.reviewed_by == "hr"
    with pytest.raises(ValidationError):
        service.resolve_confused_shift(1, 1)


def test_pending_record_is_closed_once_the_pair_assigns_on_its_own(world, at):
    _same_start_setup(world, at)
    service = world.service()
    service.process_day("EMP001", DAY)
    assert world.confused.get_by_id(1).is_pending

    world.punches.punches.pop()
    world.punches.add("EMP001", at("2024-03-01", "18:30"), "OUT")
    world.roster("EMP001", DAY, 2)
    outcome = service.process_day("EMP001", DAY)

    (segment,) = outcome.attendance.segments
    assert segment.shift_id == 2
    assert segment.match_method == MatchMethod.ROSTER_PRIORITY
    record = world.confused.get_by_id(1)
    assert record.status == ConfusedStatus.RESOLVED
    assert record.assigned_shift_id == 2
    assert record.reviewed_by == "system"
    assert len(world.confused.records) == 1

    again = service.process_day("EMP001", DAY)
    assert [s.shift_id for s in again.attendance.segments] == [2]
    assert again.confusions == ()


def test_resolve_checks_the_shift(world, at):
    _same_start_setup(world, at)
    world.add_shift(9, "Old", "09:00", "17:00", is_active=False)
    service = world.service()
    service.process_day("EMP001", DAY)

    with pytest.raises(NotFoundError):
        service.resolve_confused_shift(1, 99)
    with pytest.raises(ValidationError):
        service.resolve_confused_shift(1, 9)
    with pytest.raises(NotFoundError):
        service.resolve_confused_shift(42, 1)


def test_auto_assign_picks_best_proximity_candidate(world, at):
    _same_start_setup(world, at)
    service = world.service()
    service.process_day("EMP001", DAY)

    outcome = service.auto_assign_nearest(1)

    assert outcome.attendance.segments[0].shift_id == 1
    record = world.confused.get_by_id(1)
    assert record.reviewed_by == "system"
    assert record.review_comments.startswith("Auto-assigned nearest")


def test_list_confused_filters_by_status(world, at):
    _same_start_setup(world, at)
    service = world.service()
    service.process_day("EMP001", DAY)

    assert len(service.list_confused(status="pending")) == 1
    assert service.list_confused(status="resolved") == []
    assert len(service.list_confused(employee_number="emp001", start_date="2024-03-01", end_date="2024-03-01")) == 1
    with pytest.raises(ValidationError):
        service.list_confused(status="maybe")


def test_get_day(world, at):
    _same_start_setup(world, at)
    service = world.service()

    with pytest.raises(NotFoundError):
        service.get_day("EMP001", "2024-03-01")

    service.process_day("EMP001", DAY)

    assert service.get_day("emp001", "2024-03-01").work_date == DAY


def test_batch_keeps_going_past_failures(world, at):
    world.add_shift(1, "General", "09:00", "18:00")
    world.add_employee("EMP001")
    world.punches.add("EMP001", at("2024-03-01", "09:00"), "IN")
    world.punches.add("EMP001", at("2024-03-01", "18:00"), "OUT")

    report = world.service(max_workers=2).reprocess_batch(["EMP001", "GHOST"], "2024-03-01", "2024-03-02")

    assert report.processed == 2
    assert report.failed == 2
    assert {e.employee_number for e in report.errors} == {"GHOST"}
    assert report.to_dict()["errors"][0]["work_date"] == "2024-03-01"


def test_batch_defaults_to_active_employees(world):
    world.add_employee("EMP001")
    world.add_employee("EMP002", is_active=False)

    report = world.service().reprocess_batch(None, DAY, DAY)

    assert report.processed == 1
    assert world.daily.get(employee_number="EMP002", work_date=DAY) is None


def test_downstream_hooks_run_and_failures_do_not_propagate(world, at):
    world.add_shift(1, "General", "09:00", "18:00")
    world.add_employee("EMP001")
    calls = []

    def record(employee_number, work_date):
        calls.append((employee_number, work_date))

    def broken(employee_number, work_date):
        raise RuntimeError("payroll down")

    service = world.service(downstream_hooks=[broken, record], hook_executor=ThreadPoolExecutor(max_workers=1))
    service.process_day("EMP001", DAY)
    service.shutdown()

    assert calls == [("EMP001", DAY)]
