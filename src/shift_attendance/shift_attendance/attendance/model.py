from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import ConfusedStatus, DayStatus, MatchMethod, SegmentStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_iso(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class ShiftSegment:
    """One worked shift inside a day (at most three per day)."""

    shift_number: int
    in_time: datetime
    out_time: Optional[datetime] = None
    shift_id: Optional[int] = None
    shift_name: Optional[str] = None
    shift_start: Optional[str] = None
    shift_end: Optional[str] = None
    late_in_minutes: Optional[float] = None
    early_out_minutes: Optional[float] = None
    is_late_in: bool = False
    is_early_out: bool = False
    punch_hours: float = 0.0
    od_hours: float = 0.0
    working_hours: float = 0.0
    extra_hours: float = 0.0
    ot_hours: float = 0.0
    expected_hours: float = 0.0
    payable_fraction: float = 0.0
    status: SegmentStatus = SegmentStatus.INCOMPLETE
    match_method: Optional[MatchMethod] = None

    @property
    def is_assigned(self) -> bool:
        return self.shift_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "shift_number": self.shift_number,
            "in_time": _iso(self.in_time),
            "out_time": _iso(self.out_time),
            "shift_id": self.shift_id,
            "shift_name": self.shift_name,
            "shift_start": self.shift_start,
            "shift_end": self.shift_end,
            "late_in_minutes": self.late_in_minutes,
            "early_out_minutes": self.early_out_minutes,
            "is_late_in": self.is_late_in,
            "is_early_out": self.is_early_out,
            "punch_hours": self.punch_hours,
            "od_hours": self.od_hours,
            "working_hours": self.working_hours,
            "extra_hours": self.extra_hours,
            "ot_hours": self.ot_hours,
            "expected_hours": self.expected_hours,
            "payable_fraction": self.payable_fraction,
            "status": self.status.value,
            "match_method": self.match_method.value if self.match_method else None,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ShiftSegment":
        return cls(
            shift_number=int(d["shift_number"]),
            in_time=_parse_iso(d["in_time"]),
            out_time=_parse_iso(d.get("out_time")),
            shift_id=d.get("shift_id"),
            shift_name=d.get("shift_name"),
            shift_start=d.get("shift_start"),
            shift_end=d.get("shift_end"),
            late_in_minutes=d.get("late_in_minutes"),
            early_out_minutes=d.get("early_out_minutes"),
            is_late_in=bool(d.get("is_late_in")),
            is_early_out=bool(d.get("is_early_out")),
            punch_hours=float(d.get("punch_hours") or 0),
            od_hours=float(d.get("od_hours") or 0),
            working_hours=float(d.get("working_hours") or 0),
            extra_hours=float(d.get("extra_hours") or 0),
            ot_hours=float(d.get("ot_hours") or 0),
            expected_hours=float(d.get("expected_hours") or 0),
            payable_fraction=float(d.get("payable_fraction") or 0),
            status=SegmentStatus(d.get("status") or SegmentStatus.INCOMPLETE.value),
            match_method=MatchMethod(d["match_method"]) if d.get("match_method") else None,
        )


@dataclass(frozen=True)
class DailyAttendance:
    """Aggregate for one (employee, date). Unique per pair."""

    employee_number: str
    work_date: date
    status: DayStatus
    segments: tuple[ShiftSegment, ...] = field(default_factory=tuple)
    working_hours: float = 0.0
    ot_hours: float = 0.0
    extra_hours: float = 0.0
    od_hours: float = 0.0
    late_minutes: float = 0.0
    early_minutes: float = 0.0
    expected_hours: float = 0.0
    payable_shifts: float = 0.0
    first_in: Optional[datetime] = None
    last_out: Optional[datetime] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_number": self.employee_number,
            "work_date": self.work_date.isoformat(),
            "status": self.status.value,
            "segments": [s.to_dict() for s in self.segments],
            "working_hours": self.working_hours,
            "ot_hours": self.ot_hours,
            "extra_hours": self.extra_hours,
            "od_hours": self.od_hours,
            "late_minutes": self.late_minutes,
            "early_minutes": self.early_minutes,
            "expected_hours": self.expected_hours,
            "payable_shifts": self.payable_shifts,
            "first_in": _iso(self.first_in),
            "last_out": _iso(self.last_out),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class CandidateSummary:
    """What a reviewer sees for each possible shift of a confused punch pair."""

    shift_id: int
    shift_name: str
    start_time: str
    end_time: str
    difference_minutes: float = 0.0
    source_priority: int = 5

    def to_dict(self) -> dict[str, Any]:
        return {
            "shift_id": self.shift_id,
            "shift_name": self.shift_name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "difference_minutes": self.difference_minutes,
            "source_priority": self.source_priority,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "CandidateSummary":
        return cls(
            shift_id=int(d["shift_id"]),
            shift_name=d.get("shift_name") or "",
            start_time=d.get("start_time") or "",
            end_time=d.get("end_time") or "",
            difference_minutes=float(d.get("difference_minutes") or 0),
            source_priority=int(d.get("source_priority") or 5),
        )


@dataclass(frozen=True)
class ConfusedShiftRecord:
    """A punch pair waiting for a human to pick the shift."""

    employee_number: str
    work_date: date
    in_time: datetime
    out_time: Optional[datetime]
    candidates: tuple[CandidateSummary, ...]
    status: ConfusedStatus = ConfusedStatus.PENDING
    confused_id: Optional[int] = None
    assigned_shift_id: Optional[int] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ConfusedStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "confused_id": self.confused_id,
            "employee_number": self.employee_number,
            "work_date": self.work_date.isoformat(),
            "in_time": _iso(self.in_time),
            "out_time": _iso(self.out_time),
            "candidates": [c.to_dict() for c in self.candidates],
            "status": self.status.value,
            "assigned_shift_id": self.assigned_shift_id,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": _iso(self.reviewed_at),
            "review_comments": self.review_comments,
        }


@dataclass(frozen=True)
class PairFailure:
    in_time: datetime
    out_time: Optional[datetime]
    reason: str
