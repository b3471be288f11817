from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...policy.model import WorkHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class LateArrivalStrategy(AttendanceStrategy):
    """Late clock-in that still counts as a full day."""

    def decide_checkin(self, *, minute: int, policy: WorkHoursPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, is_late=True)
