"""Split one day's punches into at most three shift segments.

The whole day is a fold over the IN punches of the target local date. Everything
the fold needs between punches (``block_until``, the segments built so far, the
confused pairs and the failures) lives in ``SegmenterState``; nothing is kept on
module or instance level, so running it twice on the same input gives the same
result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from functools import reduce
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import hours_between, local_date, overlap_minutes, round2, to_instant
from ..core.constants import (
    DEFAULT_EXPECTED_HOURS,
    DEFAULT_TOLERANCE_HOURS,
    LONG_PUNCH_SPLIT_HOURS,
    MAX_SANE_EXTRA_HOURS,
    MAX_SEGMENTS_PER_DAY,
    OUT_SEARCH_WINDOW_HOURS,
    SHORT_OUT_MINUTES,
    SPLIT_START_TOLERANCE_MINUTES,
    UNASSIGNED_BLOCK_HOURS,
)
from ..core.enums import MatchMethod, SourcePriority
from ..core.exceptions import CalculationError
from ..on_duty.model import OnDutyInterval
from ..punches.filtering import prepare_punches
from ..punches.model import PunchEvent
from ..settings.model import GraceOverrides
from ..shifts.detection import Ambiguous, Assigned, DetectionResult, detect_shift, measure_late_early
from ..shifts.matcher import annotate, shift_window
from ..shifts.model import CandidateSet, ShiftCandidate, ShiftDefinition
from .factory import SegmentStatusFactory
from .model import CandidateSummary, ConfusedShiftRecord, PairFailure, ShiftSegment

logger = logging.getLogger(__name__)

PENDING_REVIEW = "pending manual review"


@dataclass(frozen=True)
class SegmenterContext:
    """Read-only inputs for one (employee, date) run."""

    employee_number: str
    work_date: date
    tz: timezone
    candidate_set: CandidateSet
    grace: GraceOverrides = field(default_factory=GraceOverrides)
    on_duty: tuple[OnDutyInterval, ...] = ()
    tolerance_hours: float = DEFAULT_TOLERANCE_HOURS
    # in_time -> shift chosen by a reviewer
    manual_assignments: Mapping[datetime, ShiftDefinition] = field(default_factory=dict)
    # (in_time, out_time) pairs still waiting for review
    pending_pairs: frozenset = frozenset()
    status_factory: SegmentStatusFactory = field(default_factory=SegmentStatusFactory)


@dataclass(frozen=True)
class SegmenterState:
    block_until: Optional[datetime] = None
    segments: tuple[ShiftSegment, ...] = ()
    confusions: tuple[ConfusedShiftRecord, ...] = ()
    failures: tuple[PairFailure, ...] = ()

    @property
    def is_full(self) -> bool:
        return len(self.segments) >= MAX_SEGMENTS_PER_DAY


def segment_day(punches: Iterable[PunchEvent], ctx: SegmenterContext) -> SegmenterState:
    """Punches may span the work date +/- one day; only INs on the work date start segments."""
    ordered = prepare_punches(punches)
    outs = [p for p in ordered if p.is_out]
    ins = [p for p in ordered if p.is_in and local_date(p.instant, ctx.tz) == ctx.work_date]
    return reduce(lambda state, punch: _step(state, punch, ctx, outs), ins, SegmenterState())


def _step(state: SegmenterState, punch: PunchEvent, ctx: SegmenterContext, outs: Sequence[PunchEvent]) -> SegmenterState:
    if state.is_full:
        return state

    in_time = punch.instant
    if state.block_until is not None and in_time < state.block_until:
        logger.debug("Skipping IN %s for %s (inside shift window until %s)", in_time, ctx.employee_number, state.block_until)
        return state

    out_time = _next_out(outs, in_time)

    if out_time is not None and hours_between(out_time, in_time) > LONG_PUNCH_SPLIT_HOURS:
        split_state = _split_long_punch(state, in_time, out_time, ctx)
        if split_state is not None:
            return split_state

    result = _detect(in_time, out_time, ctx)

    if not isinstance(result, Assigned) and out_time is not None and out_time - in_time < timedelta(minutes=SHORT_OUT_MINUTES):
        logger.info("No shift for %s at %s and OUT is under an hour later; looking for a later OUT", ctx.employee_number, in_time)
        out_time = _next_out(outs, in_time, min_gap=timedelta(minutes=SHORT_OUT_MINUTES))
        result = _detect(in_time, out_time, ctx)

    number = len(state.segments) + 1

    if isinstance(result, Assigned):
        anchor = result.candidate.anchor_date or ctx.work_date
        _, shift_end = shift_window(result.shift, anchor, ctx.tz)
        block_until = max(shift_end, out_time) if out_time is not None else shift_end
        segment = build_segment(number, in_time, out_time, result, ctx)
        return replace(state, block_until=block_until, segments=state.segments + (segment,))

    fallback = in_time + timedelta(hours=UNASSIGNED_BLOCK_HOURS)
    block_until = max(fallback, out_time) if out_time is not None else fallback

    if isinstance(result, Ambiguous):
        segment = build_segment(number, in_time, out_time, None, ctx)
        confusions = state.confusions
        if result.candidates:
            confusions += (_confused_record(in_time, out_time, result.candidates, ctx),)
        return replace(state, block_until=block_until, segments=state.segments + (segment,), confusions=confusions)

    logger.warning("Shift detection failed for %s at %s: %s", ctx.employee_number, in_time, result.reason)
    failure = PairFailure(in_time=in_time, out_time=out_time, reason=result.reason)
    return replace(state, block_until=block_until, failures=state.failures + (failure,))


def _next_out(outs: Sequence[PunchEvent], in_time: datetime, *, min_gap: timedelta = timedelta(0)) -> Optional[datetime]:
    window = timedelta(hours=OUT_SEARCH_WINDOW_HOURS)
    for p in outs:
        gap = p.instant - in_time
        if gap > timedelta(0) and gap >= min_gap and gap <= window:
            return p.instant
    return None


def _detect(in_time: datetime, out_time: Optional[datetime], ctx: SegmenterContext) -> DetectionResult:
    manual = ctx.manual_assignments.get(in_time)
    if manual is not None:
        return _manual_assignment(manual, in_time, out_time, ctx)
    if (in_time, out_time) in ctx.pending_pairs:
        return Ambiguous((), PENDING_REVIEW)
    return detect_shift(
        in_time, out_time, ctx.candidate_set, ctx.work_date, ctx.tz, ctx.grace, tolerance_hours=ctx.tolerance_hours
    )


def _manual_assignment(
    shift: ShiftDefinition, in_time: datetime, out_time: Optional[datetime], ctx: SegmenterContext
) -> Assigned:
    priority = next(
        (c.source_priority for c in ctx.candidate_set.candidates if c.shift_id == shift.shift_id),
        SourcePriority.GLOBAL,
    )
    candidate = annotate(ShiftCandidate(shift=shift, source_priority=priority), in_time, ctx.work_date, ctx.tz)
    late, early = measure_late_early(candidate, in_time, out_time, ctx.work_date, ctx.tz, ctx.grace)
    return Assigned(candidate=candidate, match_method=MatchMethod.MANUAL, late_in_minutes=late, early_out_minutes=early)


def _closest_start(
    instant: datetime, candidates: Iterable[ShiftCandidate], ctx: SegmenterContext
) -> Optional[ShiftCandidate]:
    near = [annotate(c, instant, ctx.work_date, ctx.tz) for c in candidates]
    near = [c for c in near if c.difference_minutes <= SPLIT_START_TOLERANCE_MINUTES]
    if not near:
        return None
    return min(near, key=lambda c: (c.difference_minutes, int(c.source_priority)))


def _split_long_punch(
    state: SegmenterState, in_time: datetime, out_time: datetime, ctx: SegmenterContext
) -> Optional[SegmenterState]:
    """Two back-to-back shifts covering one very long punch pair, or None."""
    if len(state.segments) + 2 > MAX_SEGMENTS_PER_DAY:
        return None

    first = _closest_start(in_time, ctx.candidate_set.candidates, ctx)
    if first is None:
        return None
    _, first_end = shift_window(first.shift, first.anchor_date or ctx.work_date, ctx.tz)
    if out_time <= first_end:
        return None

    others = [c for c in ctx.candidate_set.candidates if c.shift_id != first.shift_id]
    second = _closest_start(first_end, others, ctx)
    if second is None:
        return None

    late, _ = measure_late_early(first, in_time, None, ctx.work_date, ctx.tz, ctx.grace, with_early=False)
    _, early = measure_late_early(second, None, out_time, ctx.work_date, ctx.tz, ctx.grace, with_late=False)

    logger.info(
        "Splitting %.1fh punch for %s into %s + %s",
        hours_between(out_time, in_time), ctx.employee_number, first.shift.name, second.shift.name,
    )
    number = len(state.segments)
    segments = (
        build_segment(
            number + 1, in_time, first_end,
            Assigned(candidate=first, match_method=MatchMethod.LONG_PUNCH_SPLIT, late_in_minutes=late), ctx,
        ),
        build_segment(
            number + 2, first_end, out_time,
            Assigned(candidate=second, match_method=MatchMethod.LONG_PUNCH_SPLIT, early_out_minutes=early), ctx,
        ),
    )
    return replace(state, block_until=out_time, segments=state.segments + segments)


def _od_window(od: OnDutyInterval, tz: timezone) -> tuple[datetime, datetime]:
    start = to_instant(od.work_date, od.start_time, tz)
    end = to_instant(od.work_date, od.end_time, tz)
    if end < start:
        end += timedelta(days=1)
    return start, end


def build_segment(
    number: int,
    in_time: datetime,
    out_time: Optional[datetime],
    assigned: Optional[Assigned],
    ctx: SegmenterContext,
) -> ShiftSegment:
    punch_hours = round2(hours_between(out_time, in_time)) if out_time is not None else 0.0
    has_out = out_time is not None

    if assigned is None:
        expected = float(DEFAULT_EXPECTED_HOURS)
        decision = ctx.status_factory.for_segment(
            working_hours=punch_hours, expected_hours=expected, has_out=has_out
        ).decide(payable_value=0.0)
        return ShiftSegment(
            shift_number=number,
            in_time=in_time,
            out_time=out_time,
            punch_hours=punch_hours,
            working_hours=punch_hours,
            expected_hours=expected,
            payable_fraction=decision.payable_fraction,
            status=decision.status,
        )

    shift = assigned.shift
    late, early = assigned.late_in_minutes, assigned.early_out_minutes
    is_late = bool(late)
    is_early = bool(early)

    window_start, window_end = shift_window(shift, assigned.candidate.anchor_date or ctx.work_date, ctx.tz)
    od_minutes = 0.0
    for od in ctx.on_duty:
        if not od.is_hour_based:
            continue
        try:
            od_start, od_end = _od_window(od, ctx.tz)
        except CalculationError as exc:
            logger.warning("Ignoring on-duty %s for %s: %s", od.od_id, ctx.employee_number, exc)
            continue

        in_shift = overlap_minutes(window_start, window_end, od_start, od_end)
        covered = overlap_minutes(in_time, out_time, od_start, od_end) if has_out else 0.0
        od_minutes += max(0.0, in_shift - covered)

        if is_late and od_start <= window_start and od_end >= in_time:
            is_late, late = False, 0.0
        if is_early and has_out and od_start <= out_time and od_end >= window_end:
            is_early, early = False, 0.0

    od_hours = round2(od_minutes / 60.0)
    working = round2(punch_hours + od_hours)
    expected = float(shift.expected_hours or DEFAULT_EXPECTED_HOURS)

    extra = round2(max(0.0, working - expected))
    if extra > MAX_SANE_EXTRA_HOURS:
        logger.warning(
            "Discarding %.2f extra hours for %s on %s (shift %s); likely a date/timezone mismatch",
            extra, ctx.employee_number, ctx.work_date, shift.shift_id,
        )
        extra = 0.0

    decision = ctx.status_factory.for_segment(
        working_hours=working, expected_hours=expected, has_out=has_out
    ).decide(payable_value=shift.payable_value)

    return ShiftSegment(
        shift_number=number,
        in_time=in_time,
        out_time=out_time,
        shift_id=shift.shift_id,
        shift_name=shift.name,
        shift_start=shift.start_time,
        shift_end=shift.end_time,
        late_in_minutes=late,
        early_out_minutes=early,
        is_late_in=is_late,
        is_early_out=is_early,
        punch_hours=punch_hours,
        od_hours=od_hours,
        working_hours=working,
        extra_hours=extra,
        expected_hours=expected,
        payable_fraction=decision.payable_fraction,
        status=decision.status,
        match_method=assigned.match_method,
    )


def summarize_candidates(candidates: Iterable[ShiftCandidate]) -> tuple[CandidateSummary, ...]:
    return tuple(
        CandidateSummary(
            shift_id=c.shift_id,
            shift_name=c.shift.name,
            start_time=c.shift.start_time,
            end_time=c.shift.end_time,
            difference_minutes=round2(c.difference_minutes),
            source_priority=int(c.source_priority),
        )
        for c in candidates
    )


def _confused_record(
    in_time: datetime, out_time: Optional[datetime], candidates: Sequence[ShiftCandidate], ctx: SegmenterContext
) -> ConfusedShiftRecord:
    return ConfusedShiftRecord(
        employee_number=ctx.employee_number,
        work_date=ctx.work_date,
        in_time=in_time,
        out_time=out_time,
        candidates=summarize_candidates(candidates),
    )
