from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import minutes_of_day
from ..policy.model import WorkHoursPolicy
from .model import WorkScheduleFlags


@dataclass(frozen=True)
class WindowCheck:
    valid: bool
    message: Optional[str] = None


def admission_window(policy: WorkHoursPolicy) -> tuple[int, int]:
    """[start - flex, end + flex] as minutes of day."""
    start = minutes_of_day(policy.start) - policy.flex_minutes
    end = minutes_of_day(policy.end) + policy.flex_minutes
    return start, end


def is_within_work_hours(minute: int, policy: WorkHoursPolicy) -> WindowCheck:
    start, end = admission_window(policy)
    if minute < start:
        return WindowCheck(False, "Too early - before work hours")
    if minute > end:
        return WindowCheck(False, "Too late - after work hours")
    return WindowCheck(True)


def compute_schedule_flags(minute: int, policy: WorkHoursPolicy) -> WorkScheduleFlags:
    expected_start = minutes_of_day(policy.start)
    flex = policy.flex_minutes
    return WorkScheduleFlags(
        expected_start=policy.start,
        expected_end=policy.end,
        is_flex_time=abs(minute - expected_start) <= flex,
        is_late_arrival=minute > expected_start + flex,
        is_early_arrival=minute < expected_start - flex,
    )


def is_past_deadline(minute: int, policy: WorkHoursPolicy) -> bool:
    return minute > minutes_of_day(policy.attendance_deadline)
