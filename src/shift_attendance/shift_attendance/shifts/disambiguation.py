from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from ..common.datetime_utils import local_minutes, minutes_between
from ..core.constants import (
    AMBIGUITY_BAND_MINUTES,
    CLEAR_OUT_FIT_MINUTES,
    DEFAULT_SCORE_THRESHOLD,
    IN_TIME_WEIGHT,
    MINUTES_PER_DAY,
    OUT_TIME_WEIGHT,
    ROSTER_FAST_PATH_MINUTES,
    ROSTER_SCORE_MULTIPLIER,
    TIGHT_SCORE_THRESHOLD,
)
from .matcher import shift_window
from .model import ShiftCandidate


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: ShiftCandidate
    out_fit_minutes: float
    score: float


def same_start_time(candidates: Sequence[ShiftCandidate]) -> bool:
    return len({c.shift.start_minutes for c in candidates}) == 1


def out_time_fit(candidate: ShiftCandidate, out_time: datetime, work_date: date, tz: timezone) -> float:
    """Absolute minutes between ``out_time`` and the candidate's shift end."""
    _, end = shift_window(candidate.shift, candidate.anchor_date or work_date, tz)
    return abs(minutes_between(out_time, end))


def roster_fast_path(
    candidates: Sequence[ShiftCandidate], out_time: datetime, work_date: date, tz: timezone
) -> Optional[ShiftCandidate]:
    """The roster candidate when its shift end is within 90 minutes of ``out_time``."""
    for c in candidates:
        if c.is_roster:
            if out_time_fit(c, out_time, work_date, tz) < ROSTER_FAST_PATH_MINUTES:
                return c
            return None
    return None


def score_candidates(
    candidates: Sequence[ShiftCandidate], out_time: datetime, work_date: date, tz: timezone
) -> list[ScoredCandidate]:
    scored = []
    for c in candidates:
        fit = out_time_fit(c, out_time, work_date, tz)
        score = c.difference_minutes * IN_TIME_WEIGHT + fit * OUT_TIME_WEIGHT
        if c.is_roster:
            score *= ROSTER_SCORE_MULTIPLIER
        scored.append(ScoredCandidate(candidate=c, out_fit_minutes=fit, score=score))
    scored.sort(key=lambda s: s.score)
    return scored


def disambiguate_with_out_time(
    candidates: Sequence[ShiftCandidate],
    out_time: Optional[datetime],
    work_date: date,
    tz: timezone,
) -> Optional[ShiftCandidate]:
    """Pick the candidate whose combined in/out fit clearly beats the runner-up.

    The winner must lead by 15 minutes when its own out-time fit is under 30 minutes,
    otherwise by 30. Returns None when no candidate is a clear winner.
    """
    if out_time is None or not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    top, second = score_candidates(candidates, out_time, work_date, tz)[:2]
    threshold = TIGHT_SCORE_THRESHOLD if top.out_fit_minutes < CLEAR_OUT_FIT_MINUTES else DEFAULT_SCORE_THRESHOLD
    if second.score - top.score > threshold:
        return top.candidate
    return None


def _circular_distance(a: int, b: int) -> int:
    d = abs(a - b)
    return min(d, MINUTES_PER_DAY - d)


def is_ambiguous_arrival(in_time: datetime, candidates: Sequence[ShiftCandidate], tz: timezone) -> bool:
    """True when the arrival could plausibly belong to either of the two best candidates.

    ``candidates`` must already be sorted best first.
    """
    if len(candidates) <= 1:
        return False
    top, second = candidates[0], candidates[1]
    if top.is_preferred:
        return False

    clear_lead = top.is_start_before_log and not second.is_start_before_log

    if abs(second.difference_minutes - top.difference_minutes) < AMBIGUITY_BAND_MINUTES:
        return not clear_lead

    in_minutes = local_minutes(in_time, tz)
    min_start = min(top.shift.start_minutes, second.shift.start_minutes)
    max_start = max(top.shift.start_minutes, second.shift.start_minutes)

    if max_start - min_start > 12 * 60:
        if not ((min_start <= in_minutes <= 23 * 60) or in_minutes <= max_start):
            return False
        to_min = _circular_distance(in_minutes, min_start)
        to_max = _circular_distance(in_minutes, max_start)
    else:
        if not (min_start < in_minutes < max_start):
            return False
        to_min = in_minutes - min_start
        to_max = max_start - in_minutes

    if abs(to_min - to_max) < AMBIGUITY_BAND_MINUTES:
        return not clear_lead
    return False
