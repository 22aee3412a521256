from __future__ import annotations

from enum import Enum


class PunchDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


class DayType(str, Enum):
    """Day type carried by a roster entry."""

    NORMAL = "NORMAL"
    WEEK_OFF = "WEEK_OFF"
    HOLIDAY = "HOLIDAY"


class SegmentStatus(str, Enum):
    PRESENT = "PRESENT"
    HALF_DAY = "HALF_DAY"
    ABSENT = "ABSENT"
    INCOMPLETE = "INCOMPLETE"


class DayStatus(str, Enum):
    """Overall status of one attendance day."""

    PRESENT = "PRESENT"
    HALF_DAY = "HALF_DAY"
    PARTIAL = "PARTIAL"
    ABSENT = "ABSENT"
    HOLIDAY = "HOLIDAY"
    WEEK_OFF = "WEEK_OFF"


class ConfusedStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class SourcePriority(int, Enum):
    """Where a candidate shift came from; lower wins."""

    ROSTER = 1
    DESIGNATION = 2
    DEPARTMENT = 3
    DIVISION = 4
    GLOBAL = 5


class MatchMethod(str, Enum):
    PROXIMITY_SINGLE = "proximity_single"
    NEAREST_FALLBACK = "nearest_fallback"
    ROSTER_BLIND = "roster_blind"
    ROSTER_PRIORITY = "roster_priority"
    OUTTIME_DISAMBIGUATED = "outtime_disambiguated"
    PROXIMITY_CLOSEST = "proximity_closest"
    LONG_PUNCH_SPLIT = "long_punch_split"
    MANUAL = "manual"


class OnDutyType(str, Enum):
    HOURS = "hours"
    HALF_DAY = "half_day"
    FULL_DAY = "full_day"
