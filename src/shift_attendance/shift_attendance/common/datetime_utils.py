from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Union

from ..core.exceptions import CalculationError

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")
_OFFSET = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


@dataclass(frozen=True)
class LocalParts:
    year: int
    month: int
    day: int
    hour: int
    minute: int

    @property
    def date_str(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_utc_offset(value: str) -> timezone:
    """Turn ``+05:30`` style offsets into a fixed ``timezone``."""
    m = _OFFSET.match((value or "").strip())
    if not m:
        raise ValueError(f"Invalid UTC offset: {value!r}")
    sign = -1 if m.group(1) == "-" else 1
    delta = timedelta(hours=int(m.group(2)), minutes=int(m.group(3)))
    return timezone(sign * delta)


def parse_hhmm(value: str) -> tuple[int, int]:
    """Split ``HH:MM`` into (hour, minute).

    Raises CalculationError for anything that is not a valid wall-clock time.
    """
    m = _HHMM.match(value or "")
    if not m:
        raise CalculationError(f"Malformed shift time: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise CalculationError(f"Malformed shift time: {value!r}")
    return hour, minute


def hhmm_to_minutes(value: str) -> int:
    hour, minute = parse_hhmm(value)
    return hour * 60 + minute


def to_instant(work_date: Union[date, str], hhmm: str, tz: timezone, *, days: int = 0) -> datetime:
    """Absolute instant of ``hhmm`` on ``work_date`` (+ ``days``) in the organization offset.

    The process timezone is never consulted.
    """
    if isinstance(work_date, str):
        work_date = parse_iso_date(work_date)
    hour, minute = parse_hhmm(hhmm)
    d = work_date + timedelta(days=days)
    return datetime.combine(d, time(hour, minute), tzinfo=tz)


def ensure_aware(instant: datetime, tz: timezone) -> datetime:
    """Naive datetimes are taken to be UTC (how the punch store keeps them)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc).astimezone(tz)
    return instant


def local_components(instant: datetime, tz: timezone) -> LocalParts:
    local = ensure_aware(instant, tz).astimezone(tz)
    return LocalParts(local.year, local.month, local.day, local.hour, local.minute)


def local_date(instant: datetime, tz: timezone) -> date:
    return ensure_aware(instant, tz).astimezone(tz).date()


def local_minutes(instant: datetime, tz: timezone) -> int:
    parts = local_components(instant, tz)
    return parts.hour * 60 + parts.minute


def minutes_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 60.0


def hours_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 3600.0


def overlap_minutes(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> float:
    start = max(start_a, start_b)
    end = min(end_a, end_b)
    return max(0.0, minutes_between(end, start))


def round2(value: float) -> float:
    return round(float(value), 2)
