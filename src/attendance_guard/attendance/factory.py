from __future__ import annotations

from dataclasses import dataclass

from ..policy.model import WorkHoursPolicy
from .schedule import compute_schedule_flags, is_past_deadline
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateArrivalStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on tenant policy."""

    def for_checkin(self, *, minute: int, policy: WorkHoursPolicy) -> AttendanceStrategy:
        past_deadline = is_past_deadline(minute, policy)
        if past_deadline and policy.half_day_after_deadline:
            return HalfDayStrategy()
        if past_deadline or compute_schedule_flags(minute, policy).is_late_arrival:
            return LateArrivalStrategy()
        return NormalStrategy()
