from datetime import date

from src.shift_attendance.shift_attendance.core.enums import MatchMethod, SourcePriority
from src.shift_attendance.shift_attendance.core.exceptions import InputError, NotFoundError
from src.shift_attendance.shift_attendance.settings.model import GraceOverrides
from src.shift_attendance.shift_attendance.shifts.detection import Ambiguous, Assigned, Failed, detect_shift
from src.shift_attendance.shift_attendance.shifts.model import CandidateSet, ShiftCandidate, ShiftDefinition

DAY = date(2024, 3, 1)


def _set(*specs):
    candidates = []
    for shift_id, start, end, priority in specs:
        shift = ShiftDefinition(shift_id=shift_id, name=f"S{shift_id}", start_time=start, end_time=end)
        candidates.append(ShiftCandidate(shift=shift, source_priority=priority))
    return CandidateSet(candidates=tuple(candidates))


GENERAL = (1, "09:00", "18:00", SourcePriority.DESIGNATION)
HALF = (2, "09:00", "13:00", SourcePriority.DEPARTMENT)


def test_missing_in_time_is_an_input_failure(ist):
    result = detect_shift(None, None, _set(GENERAL), DAY, ist)

    assert isinstance(result, Failed)
    assert isinstance(result.error, InputError)


def test_no_candidates_is_not_found(at, ist):
    result = detect_shift(at("2024-03-01", "09:00"), None, CandidateSet(), DAY, ist)

    assert isinstance(result, Failed)
    assert isinstance(result.error, NotFoundError)


def test_single_candidate_measures_late_and_early(at, ist):
    result = detect_shift(at("2024-03-01", "09:40"), at("2024-03-01", "13:00"), _set(GENERAL), DAY, ist)

    assert isinstance(result, Assigned)
    assert result.match_method == MatchMethod.PROXIMITY_SINGLE
    assert result.late_in_minutes == 25
    assert result.early_out_minutes == 285


def test_global_grace_override_is_used(at, ist):
    grace = GraceOverrides(late_in_grace=0, early_out_grace=0)

    result = detect_shift(at("2024-03-01", "09:10"), at("2024-03-01", "17:50"), _set(GENERAL), DAY, ist, grace)

    assert result.late_in_minutes == 10
    assert result.early_out_minutes == 10


def test_nearest_fallback_outside_tolerance(at, ist):
    result = detect_shift(at("2024-03-01", "13:00"), None, _set(GENERAL), DAY, ist)

    assert isinstance(result, Assigned)
    assert result.match_method == MatchMethod.NEAREST_FALLBACK


def test_same_start_without_out_time_is_ambiguous(at, ist):
    result = detect_shift(at("2024-03-01", "09:05"), None, _set(GENERAL, HALF), DAY, ist)

    assert isinstance(result, Ambiguous)
    assert {c.shift_id for c in result.candidates} == {1, 2}


def test_same_start_without_out_time_takes_roster_shift(at, ist):
    roster = (2, "09:00", "13:00", SourcePriority.ROSTER)

    result = detect_shift(at("2024-03-01", "09:05"), None, _set(GENERAL, roster), DAY, ist)

    assert isinstance(result, Assigned)
    assert result.match_method == MatchMethod.ROSTER_BLIND
    assert result.shift.shift_id == 2


def test_same_start_roster_priority_when_out_fits(at, ist):
    roster = (2, "09:00", "13:00", SourcePriority.ROSTER)

    result = detect_shift(at("2024-03-01", "09:05"), at("2024-03-01", "13:30"), _set(GENERAL, roster), DAY, ist)

    assert result.match_method == MatchMethod.ROSTER_PRIORITY
    assert result.shift.shift_id == 2


def test_same_start_resolved_by_out_time(at, ist):
    result = detect_shift(at("2024-03-01", "09:05"), at("2024-03-01", "18:10"), _set(GENERAL, HALF), DAY, ist)

    assert result.match_method == MatchMethod.OUTTIME_DISAMBIGUATED
    assert result.shift.shift_id == 1


def test_ambiguous_arrival_resolved_by_out_time(at, ist):
    shifts = _set((1, "09:00", "17:00", SourcePriority.DESIGNATION), (2, "09:20", "18:20", SourcePriority.DESIGNATION))

    without_out = detect_shift(at("2024-03-01", "08:50"), None, shifts, DAY, ist)
    with_out = detect_shift(at("2024-03-01", "08:50"), at("2024-03-01", "18:20"), shifts, DAY, ist)

    assert isinstance(without_out, Ambiguous)
    assert with_out.match_method == MatchMethod.OUTTIME_DISAMBIGUATED
    assert with_out.shift.shift_id == 2


def test_closest_start_wins_otherwise(at, ist):
    shifts = _set(GENERAL, (3, "10:00", "19:00", SourcePriority.DESIGNATION))

    result = detect_shift(at("2024-03-01", "08:55"), None, shifts, DAY, ist)

    assert result.match_method == MatchMethod.PROXIMITY_CLOSEST
    assert result.shift.shift_id == 1
    assert result.late_in_minutes == 0
    assert result.early_out_minutes is None


def test_malformed_shift_time_leaves_late_early_unset(at, ist):
    broken = CandidateSet(candidates=(
        ShiftCandidate(
            shift=ShiftDefinition(shift_id=9, name="Broken", start_time="09:00", end_time="6pm"),
            source_priority=SourcePriority.GLOBAL,
        ),
    ))

    result = detect_shift(at("2024-03-01", "09:30"), at("2024-03-01", "18:00"), broken, DAY, ist)

    assert isinstance(result, Assigned)
    assert result.late_in_minutes is None
    assert result.early_out_minutes is None


def test_early_morning_shift_entered_the_evening_before_is_not_late(at, ist):
    early = _set((7, "01:00", "09:00", SourcePriority.DESIGNATION))

    result = detect_shift(at("2024-03-01", "23:30"), at("2024-03-02", "09:00"), early, DAY, ist)

    assert result.match_method == MatchMethod.PROXIMITY_SINGLE
    assert result.candidate.anchor_date == date(2024, 3, 2)
    assert result.late_in_minutes == 0
    assert result.early_out_minutes == 0


def test_early_morning_shift_lateness_is_measured_on_its_own_day(at, ist):
    early = _set((7, "01:00", "09:00", SourcePriority.DESIGNATION))

    result = detect_shift(at("2024-03-01", "23:30"), None, early, DAY, ist, GraceOverrides(late_in_grace=0))

    assert result.late_in_minutes == 0
    late = detect_shift(at("2024-03-02", "01:40"), None, early, date(2024, 3, 2), ist)
    assert late.late_in_minutes == 25
