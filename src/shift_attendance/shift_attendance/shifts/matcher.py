from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from functools import cmp_to_key
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import local_minutes, minutes_between, to_instant
from ..core.constants import (
    DEFAULT_TOLERANCE_HOURS,
    MINUTES_PER_DAY,
    NOON_MINUTES,
    OVERNIGHT_START_HOUR,
    PREFERRED_MAX_DIFFERENCE_MINUTES,
)
from ..core.enums import SourcePriority
from .model import ShiftCandidate, ShiftDefinition


def start_difference(in_time: datetime, shift: ShiftDefinition, work_date: date, tz: timezone) -> tuple[float, date]:
    """Minutes between ``in_time`` and the nearest relevant occurrence of the shift start.

    Returns (difference, date of that occurrence).
    """
    start_today = to_instant(work_date, shift.start_time, tz)
    signed = minutes_between(in_time, start_today)
    difference = abs(signed)
    anchor = work_date

    if shift.start_minutes >= OVERNIGHT_START_HOUR * 60:
        prev_day = work_date - timedelta(days=1)
        prev_diff = abs(minutes_between(in_time, to_instant(prev_day, shift.start_time, tz)))
        if prev_diff < difference:
            difference, anchor = prev_diff, prev_day
    elif difference > 12 * 60:
        difference = abs(MINUTES_PER_DAY - difference)
        anchor = work_date + timedelta(days=1 if signed > 0 else -1)

    return difference, anchor


def _is_start_before_log(in_minutes: int, shift: ShiftDefinition) -> bool:
    if shift.start_minutes >= OVERNIGHT_START_HOUR * 60 and in_minutes < NOON_MINUTES:
        return True
    return shift.start_minutes <= in_minutes


def annotate(candidate: ShiftCandidate, in_time: datetime, work_date: date, tz: timezone) -> ShiftCandidate:
    difference, anchor = start_difference(in_time, candidate.shift, work_date, tz)
    before = _is_start_before_log(local_minutes(in_time, tz), candidate.shift)
    return replace(
        candidate,
        difference_minutes=difference,
        is_start_before_log=before,
        is_preferred=before and difference <= PREFERRED_MAX_DIFFERENCE_MINUTES,
        anchor_date=anchor,
    )


def _compare(a: ShiftCandidate, b: ShiftCandidate) -> int:
    a_roster = a.source_priority == SourcePriority.ROSTER
    b_roster = b.source_priority == SourcePriority.ROSTER
    if a_roster != b_roster:
        return -1 if a_roster else 1
    if a.is_preferred != b.is_preferred:
        return -1 if a.is_preferred else 1
    if a.is_start_before_log != b.is_start_before_log:
        return -1 if a.is_start_before_log else 1
    if abs(a.difference_minutes - b.difference_minutes) > 0.1:
        return -1 if a.difference_minutes < b.difference_minutes else 1
    return int(a.source_priority) - int(b.source_priority)


def sort_candidates(candidates: Iterable[ShiftCandidate]) -> list[ShiftCandidate]:
    return sorted(candidates, key=cmp_to_key(_compare))


def find_candidates(
    in_time: datetime,
    candidates: Sequence[ShiftCandidate],
    work_date: date,
    tz: timezone,
    *,
    tolerance_hours: float = DEFAULT_TOLERANCE_HOURS,
) -> list[ShiftCandidate]:
    """Candidates whose start lies within ``tolerance_hours`` of ``in_time``, best first."""
    tolerance = tolerance_hours * 60
    survivors = []
    for c in candidates:
        annotated = annotate(c, in_time, work_date, tz)
        if annotated.difference_minutes <= tolerance:
            survivors.append(annotated)
    return sort_candidates(survivors)


def nearest_candidate(
    in_time: datetime,
    candidates: Sequence[ShiftCandidate],
    work_date: date,
    tz: timezone,
) -> Optional[ShiftCandidate]:
    """Globally nearest start, ignoring tolerance."""
    best: Optional[ShiftCandidate] = None
    for c in candidates:
        annotated = annotate(c, in_time, work_date, tz)
        if best is None or annotated.difference_minutes < best.difference_minutes:
            best = annotated
    return best


def shift_window(shift: ShiftDefinition, on_date: date, tz: timezone) -> tuple[datetime, datetime]:
    """Start and end instants of the occurrence of ``shift`` that starts on ``on_date``."""
    start = to_instant(on_date, shift.start_time, tz)
    end = to_instant(on_date, shift.end_time, tz, days=1 if shift.is_overnight else 0)
    return start, end
