from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_date(value, field_name: str) -> date:
    if isinstance(value, date):
        return value
    raw = require_non_empty(value, field_name)
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def require_date_range(start, end) -> tuple[date, date]:
    start_d = require_date(start, "start_date")
    end_d = require_date(end, "end_date")
    if end_d < start_d:
        raise ValidationError("end_date cannot be before start_date")
    return start_d, end_d


def normalize_employee_number(value: Optional[str]) -> str:
    return require_non_empty(value or "", "employee_number").upper()
