from __future__ import annotations

from ...core.enums import SegmentStatus
from .base import SegmentStatusStrategy, StatusDecision


class IncompleteStrategy(SegmentStatusStrategy):
    """IN without a matching OUT."""

    def decide(self, *, payable_value: float) -> StatusDecision:
        return StatusDecision(status=SegmentStatus.INCOMPLETE, payable_fraction=0.0)
