from __future__ import annotations

from ...core.enums import SegmentStatus
from .base import SegmentStatusStrategy, StatusDecision


class HalfDayStrategy(SegmentStatusStrategy):
    def decide(self, *, payable_value: float) -> StatusDecision:
        return StatusDecision(status=SegmentStatus.HALF_DAY, payable_fraction=float(payable_value) * 0.5)
