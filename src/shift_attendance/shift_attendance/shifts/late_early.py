from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..common.datetime_utils import minutes_between, parse_hhmm, round2, to_instant
from ..core.constants import DEFAULT_GRACE_MINUTES, OVERNIGHT_LATE_WINDOW_HOURS, OVERNIGHT_START_HOUR


def _resolve_grace(*choices: Optional[float]) -> float:
    for value in choices:
        if value is not None:
            return float(value)
    return DEFAULT_GRACE_MINUTES


def late_in_minutes(
    in_time: datetime,
    start_time: str,
    shift_grace: Optional[float],
    work_date: date,
    tz: timezone,
    global_grace: Optional[float] = None,
) -> float:
    """Minutes past ``start_time`` + grace. Zero when on time.

    Night shifts (start at or after 20:00) are also measured against the previous
    day's start; that measure wins when it lies in [0, 16h).
    """
    grace = _resolve_grace(global_grace, shift_grace)
    diff = minutes_between(in_time, to_instant(work_date, start_time, tz))

    start_hour, _ = parse_hhmm(start_time)
    if start_hour >= OVERNIGHT_START_HOUR:
        prev_diff = minutes_between(in_time, to_instant(work_date, start_time, tz, days=-1))
        if 0 <= prev_diff < OVERNIGHT_LATE_WINDOW_HOURS * 60:
            diff = prev_diff

    return round2(max(0.0, diff - grace))


def early_out_minutes(
    out_time: datetime,
    end_time: str,
    start_time: str,
    work_date: date,
    tz: timezone,
    global_grace: Optional[float] = None,
) -> float:
    """Minutes before ``end_time`` - grace. Only the global grace applies here."""
    grace = _resolve_grace(global_grace)
    end_hour, _ = parse_hhmm(end_time)
    start_hour, _ = parse_hhmm(start_time)

    shift_end = to_instant(work_date, end_time, tz)
    if end_hour < start_hour:
        shift_end += timedelta(days=1)

    diff = minutes_between(shift_end, out_time)
    return round2(max(0.0, diff - grace))
