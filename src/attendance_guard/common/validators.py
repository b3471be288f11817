from __future__ import annotations

from typing import Any, Mapping

from ..core.enums import AttendanceStatus, WorkMode
from ..core.exceptions import ValidationError
from .datetime_utils import is_clock_time, is_iso_date


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"Valid {field_name} is required")
    return str(value).strip()


def collect_record_errors(data: Mapping[str, Any]) -> list[str]:
    """Field-level checks for administrative record edits."""

    errors: list[str] = []

    work_date = data.get("date")
    if work_date is not None and not is_iso_date(str(work_date)):
        errors.append("Date must be in YYYY-MM-DD format")

    for key, label in (("clock_in", "Clock in"), ("clock_out", "Clock out")):
        value = data.get(key)
        if value and not is_clock_time(str(value)):
            errors.append(f"{label} time must be in HH:MM or HH:MM:SS format")

    status = data.get("status")
    if status and status not in {s.value for s in AttendanceStatus}:
        errors.append("Status must be one of: present, absent, half-day, holiday")

    work_mode = data.get("work_mode")
    if work_mode and WorkMode.parse(str(work_mode)) is None:
        errors.append("Work mode must be one of: office, remote")

    return errors


def validate_record_fields(data: Mapping[str, Any]) -> None:
    errors = collect_record_errors(data)
    if errors:
        raise ValidationError("; ".join(errors))
