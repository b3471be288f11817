from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...policy.model import WorkHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time (or flex-time) clock-in."""

    def decide_checkin(self, *, minute: int, policy: WorkHoursPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
