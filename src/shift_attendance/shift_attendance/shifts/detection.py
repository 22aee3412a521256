"""Shift detection for a single punch pair.

``detect_shift`` never writes anything. It returns one of three tags and the caller
decides what to persist:

* ``Assigned``  - a shift was chosen (with lateness/earliness already measured)
* ``Ambiguous`` - several shifts fit equally well; a human has to pick
* ``Failed``    - nothing to match against, or the pair itself is unusable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, Union

from ..core.constants import DEFAULT_TOLERANCE_HOURS
from ..core.enums import MatchMethod
from ..core.exceptions import CalculationError, DomainError, InputError, NotFoundError
from ..settings.model import GraceOverrides
from .disambiguation import disambiguate_with_out_time, is_ambiguous_arrival, roster_fast_path, same_start_time
from .late_early import early_out_minutes, late_in_minutes
from .matcher import find_candidates, nearest_candidate
from .model import CandidateSet, ShiftCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assigned:
    candidate: ShiftCandidate
    match_method: MatchMethod
    late_in_minutes: Optional[float] = None
    early_out_minutes: Optional[float] = None

    @property
    def shift(self):
        return self.candidate.shift


@dataclass(frozen=True)
class Ambiguous:
    candidates: tuple[ShiftCandidate, ...]
    reason: str = ""


@dataclass(frozen=True)
class Failed:
    reason: str
    error: DomainError = field(default_factory=DomainError)


DetectionResult = Union[Assigned, Ambiguous, Failed]


def measure_late_early(
    candidate: ShiftCandidate,
    in_time: Optional[datetime],
    out_time: Optional[datetime],
    work_date: date,
    tz: timezone,
    grace: GraceOverrides,
    *,
    with_late: bool = True,
    with_early: bool = True,
) -> tuple[Optional[float], Optional[float]]:
    """(late_in, early_out) for ``candidate``. Either side is None when not measured.

    Malformed shift times are logged and leave both values unset.
    """
    shift = candidate.shift
    late: Optional[float] = None
    early: Optional[float] = None
    # a start matched on the next day (early-morning shift, IN the evening before)
    # is measured there; night starts keep the work date and their previous-day rule
    late_date = work_date
    if candidate.anchor_date is not None and candidate.anchor_date > work_date:
        late_date = candidate.anchor_date
    try:
        if with_late and in_time is not None:
            late = late_in_minutes(
                in_time, shift.start_time, shift.grace_period, late_date, tz, grace.late_in_grace
            )
        if with_early and out_time is not None:
            early = early_out_minutes(
                out_time, shift.end_time, shift.start_time,
                candidate.anchor_date or work_date, tz, grace.early_out_grace,
            )
    except CalculationError as exc:
        logger.warning("Skipping late/early for shift %s: %s", shift.shift_id, exc)
        return None, None
    return late, early


def _assign(
    candidate: ShiftCandidate,
    method: MatchMethod,
    in_time: datetime,
    out_time: Optional[datetime],
    work_date: date,
    tz: timezone,
    grace: GraceOverrides,
) -> Assigned:
    late, early = measure_late_early(candidate, in_time, out_time, work_date, tz, grace)
    return Assigned(candidate=candidate, match_method=method, late_in_minutes=late, early_out_minutes=early)


def detect_shift(
    in_time: Optional[datetime],
    out_time: Optional[datetime],
    candidate_set: CandidateSet,
    work_date: date,
    tz: timezone,
    grace: GraceOverrides = GraceOverrides(),
    *,
    tolerance_hours: float = DEFAULT_TOLERANCE_HOURS,
) -> DetectionResult:
    if in_time is None:
        return Failed("missing in-time", InputError("Punch pair has no in-time"))
    if not candidate_set:
        return Failed("no candidate shifts", NotFoundError("No candidate shifts for employee/date"))

    survivors = find_candidates(in_time, candidate_set.candidates, work_date, tz, tolerance_hours=tolerance_hours)

    if not survivors:
        nearest = nearest_candidate(in_time, candidate_set.candidates, work_date, tz)
        if nearest is None:
            return Failed("no candidate shifts", NotFoundError("No candidate shifts for employee/date"))
        return _assign(nearest, MatchMethod.NEAREST_FALLBACK, in_time, out_time, work_date, tz, grace)

    if len(survivors) == 1:
        return _assign(survivors[0], MatchMethod.PROXIMITY_SINGLE, in_time, out_time, work_date, tz, grace)

    if same_start_time(survivors):
        if out_time is None:
            roster = next((c for c in survivors if c.is_roster), None)
            if roster is not None:
                return _assign(roster, MatchMethod.ROSTER_BLIND, in_time, out_time, work_date, tz, grace)
            return Ambiguous(tuple(survivors), "same start time, out-time needed to distinguish")

        roster = roster_fast_path(survivors, out_time, work_date, tz)
        if roster is not None:
            return _assign(roster, MatchMethod.ROSTER_PRIORITY, in_time, out_time, work_date, tz, grace)

        best = disambiguate_with_out_time(survivors, out_time, work_date, tz)
        if best is not None:
            return _assign(best, MatchMethod.OUTTIME_DISAMBIGUATED, in_time, out_time, work_date, tz, grace)
        return Ambiguous(tuple(survivors), "same start time, out-time did not help distinguish")

    if is_ambiguous_arrival(in_time, survivors, tz):
        if out_time is not None:
            best = disambiguate_with_out_time(survivors, out_time, work_date, tz)
            if best is not None:
                return _assign(best, MatchMethod.OUTTIME_DISAMBIGUATED, in_time, out_time, work_date, tz, grace)
            return Ambiguous(tuple(survivors), "ambiguous arrival, out-time did not help distinguish")
        return Ambiguous(tuple(survivors), "ambiguous arrival, out-time needed to distinguish")

    return _assign(survivors[0], MatchMethod.PROXIMITY_CLOSEST, in_time, out_time, work_date, tz, grace)
