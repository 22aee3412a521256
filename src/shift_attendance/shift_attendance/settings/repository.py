from __future__ import annotations

from typing import Protocol

from .model import GraceOverrides


class SettingsRepository(Protocol):
    def get_grace_overrides(self) -> GraceOverrides:
        raise NotImplementedError
