from __future__ import annotations

from ...core.enums import SegmentStatus
from .base import SegmentStatusStrategy, StatusDecision


class AbsentStrategy(SegmentStatusStrategy):
    """Too little time worked to earn any credit."""

    def decide(self, *, payable_value: float) -> StatusDecision:
        return StatusDecision(status=SegmentStatus.ABSENT, payable_fraction=0.0)
