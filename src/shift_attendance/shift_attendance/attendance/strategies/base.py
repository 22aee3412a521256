from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import SegmentStatus


@dataclass(frozen=True)
class StatusDecision:
    status: SegmentStatus
    payable_fraction: float = 0.0


class SegmentStatusStrategy(ABC):
    """Strategy Pattern: how a segment's worked time turns into status + payable credit."""

    @abstractmethod
    def decide(self, *, payable_value: float) -> StatusDecision:
        raise NotImplementedError
