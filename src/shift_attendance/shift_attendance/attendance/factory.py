from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import HALF_DAY_RATIO, PRESENT_RATIO
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import SegmentStatusStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.incomplete_strategy import IncompleteStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class SegmentStatusFactory:
    """Factory Pattern: choose the status strategy from worked vs expected hours.

    One threshold policy (0.9 / 0.45 of expected hours) for every kind of segment.
    """

    present_ratio: float = PRESENT_RATIO
    half_day_ratio: float = HALF_DAY_RATIO

    def for_segment(self, *, working_hours: float, expected_hours: float, has_out: bool) -> SegmentStatusStrategy:
        if not has_out:
            return IncompleteStrategy()
        if working_hours >= self.present_ratio * expected_hours:
            return PresentStrategy()
        if working_hours >= self.half_day_ratio * expected_hours:
            return HalfDayStrategy()
        return AbsentStrategy()
