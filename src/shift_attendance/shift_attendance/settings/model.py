from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GraceOverrides:
    """Organization-wide grace settings, resolved once per run."""

    late_in_grace: Optional[float] = None
    early_out_grace: Optional[float] = None
