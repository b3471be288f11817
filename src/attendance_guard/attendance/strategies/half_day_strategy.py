from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...policy.model import WorkHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Clock-in after the tenant deadline when the tenant downgrades to half-day."""

    def decide_checkin(self, *, minute: int, policy: WorkHoursPolicy) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            is_late=True,
            note=f"Marked after deadline {policy.attendance_deadline}",
        )
