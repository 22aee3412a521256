from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from ..core.constants import DOUBLE_TAP_WINDOW_MINUTES
from .model import PunchEvent


def prepare_punches(punches: Iterable[PunchEvent], *, double_tap_minutes: int = DOUBLE_TAP_WINDOW_MINUTES) -> list[PunchEvent]:
    """Sort, drop exact duplicates and drop double taps.

    A double tap is a punch within ``double_tap_minutes`` of the previous kept punch
    with the same direction.
    """
    window = timedelta(minutes=double_tap_minutes)
    last_kept: dict = {}
    kept: list[PunchEvent] = []
    seen = set()

    for p in sorted(punches, key=lambda e: (e.instant, e.direction.value)):
        key = (p.instant, p.direction)
        if key in seen:
            continue
        seen.add(key)

        previous = last_kept.get(p.direction)
        if previous is not None and p.instant - previous < window:
            continue

        last_kept[p.direction] = p.instant
        kept.append(p)
    return kept
