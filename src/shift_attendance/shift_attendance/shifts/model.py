from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import hhmm_to_minutes
from ..core.constants import DEFAULT_EXPECTED_HOURS, DEFAULT_GRACE_MINUTES, DURATION_MINUTES_CUTOFF
from ..core.enums import SourcePriority


def normalize_duration_hours(raw) -> float:
    """Shift duration is stored as hours by new data and as minutes by old data.

    Anything above 20 can only be minutes.
    """
    if raw is None or raw == "":
        return float(DEFAULT_EXPECTED_HOURS)
    value = float(raw)
    if value <= 0:
        return float(DEFAULT_EXPECTED_HOURS)
    if value > DURATION_MINUTES_CUTOFF:
        return round(value / 60.0, 2)
    return value


@dataclass(frozen=True)
class ShiftDefinition:
    """Domain entity: a work shift (immutable reference data)."""

    shift_id: int
    name: str
    start_time: str
    end_time: str
    expected_hours: float = float(DEFAULT_EXPECTED_HOURS)
    grace_period: int = DEFAULT_GRACE_MINUTES
    payable_value: float = 1.0
    is_active: bool = True

    @property
    def start_minutes(self) -> int:
        return hhmm_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return hhmm_to_minutes(self.end_time)

    @property
    def is_overnight(self) -> bool:
        return self.end_minutes < self.start_minutes


@dataclass(frozen=True)
class ShiftConfigEntry:
    """One shift allowed for a designation/department/division, optionally gender-tagged.

    Legacy rows were bare id lists; they are kept with ``legacy=True`` and are never
    filtered by gender.
    """

    shift_id: int
    gender: Optional[str] = None
    legacy: bool = False

    def allows(self, gender: Optional[str]) -> bool:
        if self.legacy:
            return True
        if not self.gender or self.gender.lower() == "all":
            return True
        return self.gender.lower() == (gender or "").lower()


def normalize_shift_configs(raw: Optional[Sequence]) -> list[ShiftConfigEntry]:
    """Accept either ``[1, 2]`` (legacy) or ``[{"shift_id": 1, "gender": "Female"}]``."""
    if not raw:
        return []
    out: list[ShiftConfigEntry] = []
    for item in raw:
        if item is None:
            continue
        if isinstance(item, ShiftConfigEntry):
            out.append(item)
        elif isinstance(item, dict):
            shift_id = item.get("shift_id", item.get("shiftId"))
            if not shift_id:
                continue
            out.append(ShiftConfigEntry(shift_id=int(shift_id), gender=item.get("gender")))
        else:
            out.append(ShiftConfigEntry(shift_id=int(item), legacy=True))
    return out


def filter_by_gender(configs: Sequence[ShiftConfigEntry], gender: Optional[str]) -> list[int]:
    return [c.shift_id for c in configs if c.allows(gender)]


@dataclass(frozen=True)
class ShiftCandidate:
    """A shift annotated with where it came from and, after matching, how close it is."""

    shift: ShiftDefinition
    source_priority: int
    difference_minutes: float = 0.0
    is_start_before_log: bool = False
    is_preferred: bool = False
    anchor_date: Optional[date] = None

    @property
    def shift_id(self) -> int:
        return self.shift.shift_id

    @property
    def is_roster(self) -> bool:
        return self.source_priority == SourcePriority.ROSTER

    def describe(self) -> str:
        return (
            f"{self.shift.name} ({self.shift.start_time}-{self.shift.end_time}) "
            f"{self.difference_minutes:.1f} min from in-time"
        )


@dataclass(frozen=True)
class CandidateSet:
    candidates: tuple[ShiftCandidate, ...] = field(default_factory=tuple)
    source: str = "none"
    roster_shift_id: Optional[int] = None

    @property
    def has_roster(self) -> bool:
        return self.roster_shift_id is not None

    @property
    def shifts(self) -> list[ShiftDefinition]:
        return [c.shift for c in self.candidates]

    def __len__(self) -> int:
        return len(self.candidates)

    def __bool__(self) -> bool:
        return bool(self.candidates)
