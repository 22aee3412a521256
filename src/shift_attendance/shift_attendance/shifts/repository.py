from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import ShiftConfigEntry, ShiftDefinition


class ShiftRepository(Protocol):
    def list_active(self) -> Sequence[ShiftDefinition]:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        raise NotImplementedError

    def get_active_by_ids(self, shift_ids: Iterable[int]) -> Sequence[ShiftDefinition]:
        """Active shifts among ``shift_ids``, in catalog order."""

        raise NotImplementedError


class ShiftConfigRepository(Protocol):
    """Per-designation/department/division shift lists.

    ``division_id``/``department_id`` select the exact context; ``None`` means the
    context-free (legacy global) list.
    """

    def get_configs(
        self,
        *,
        scope: str,
        owner_id: int,
        division_id: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> Sequence[ShiftConfigEntry]:
        raise NotImplementedError
