from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import round2
from ..core.constants import (
    FULL_DAY_OD_HOURS,
    HALF_DAY_OD_HOURS,
    HALF_DAY_PAYABLE_THRESHOLD,
    PRESENT_PAYABLE_THRESHOLD,
)
from ..core.enums import DayStatus, DayType, OnDutyType, SegmentStatus
from ..on_duty.model import OnDutyInterval
from ..rosters.model import RosterAssignment
from .model import DailyAttendance, ShiftSegment

_WORKED_NOTES = {
    DayType.HOLIDAY: "Worked on Holiday",
    DayType.WEEK_OFF: "Worked on Week Off",
}


def od_credit_hours(on_duty: Sequence[OnDutyInterval]) -> float:
    """Day-level OD credit: hour-based ODs by duration, half day 4.5h, full day 9h."""
    total = 0.0
    for od in on_duty:
        if od.od_type == OnDutyType.HOURS:
            total += float(od.duration_hours or 0)
        elif od.od_type == OnDutyType.HALF_DAY:
            total += HALF_DAY_OD_HOURS
        else:
            total += FULL_DAY_OD_HOURS
    return round2(total)


def day_status(segments: Sequence[ShiftSegment], payable: float, roster: Optional[RosterAssignment]) -> DayStatus:
    if any(s.status == SegmentStatus.PRESENT for s in segments) or payable >= PRESENT_PAYABLE_THRESHOLD:
        return DayStatus.PRESENT
    if any(s.status == SegmentStatus.HALF_DAY for s in segments) or payable >= HALF_DAY_PAYABLE_THRESHOLD:
        return DayStatus.HALF_DAY
    if not segments:
        if roster is not None and roster.day_type == DayType.HOLIDAY:
            return DayStatus.HOLIDAY
        if roster is not None and roster.day_type == DayType.WEEK_OFF:
            return DayStatus.WEEK_OFF
        return DayStatus.ABSENT
    return DayStatus.PARTIAL


def aggregate_day(
    employee_number: str,
    work_date: date,
    segments: Sequence[ShiftSegment],
    *,
    roster: Optional[RosterAssignment] = None,
    on_duty: Sequence[OnDutyInterval] = (),
    has_punches: bool = False,
) -> DailyAttendance:
    """Roll the day's segments up into one DailyAttendance."""
    segments = tuple(sorted(segments, key=lambda s: s.in_time))
    payable = round2(sum(s.payable_fraction for s in segments))

    notes = None
    if (segments or has_punches) and roster is not None:
        notes = _WORKED_NOTES.get(roster.day_type)

    outs = [s.out_time for s in segments if s.out_time is not None]

    return DailyAttendance(
        employee_number=employee_number,
        work_date=work_date,
        status=day_status(segments, payable, roster),
        segments=segments,
        working_hours=round2(sum(s.working_hours for s in segments)),
        ot_hours=round2(sum(s.ot_hours for s in segments)),
        extra_hours=round2(sum(s.extra_hours for s in segments)),
        od_hours=od_credit_hours(on_duty),
        late_minutes=round2(sum(s.late_in_minutes or 0 for s in segments)),
        early_minutes=round2(sum(s.early_out_minutes or 0 for s in segments)),
        expected_hours=round2(sum(s.expected_hours for s in segments)),
        payable_shifts=payable,
        first_in=segments[0].in_time if segments else None,
        last_out=max(outs) if outs else None,
        notes=notes,
    )
