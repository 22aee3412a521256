from __future__ import annotations

from ...core.enums import SegmentStatus
from .base import SegmentStatusStrategy, StatusDecision


class PresentStrategy(SegmentStatusStrategy):
    """Full shift worked: full payable value."""

    def decide(self, *, payable_value: float) -> StatusDecision:
        return StatusDecision(status=SegmentStatus.PRESENT, payable_fraction=float(payable_value))
