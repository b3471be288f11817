from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..attendance.geofence import haversine_distance
from ..attendance.model import AttendanceSubmission
from ..common.datetime_utils import ensure_aware, is_weekend, parse_hhmm, to_local
from ..core.enums import RiskLevel
from ..policy.model import FraudThresholds
from .model import FraudHistory, RiskAssessment


def calculate_risk_level(reason_count: int) -> RiskLevel:
    if reason_count == 0:
        return RiskLevel.LOW
    if reason_count <= 2:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


class FraudHeuristics:
    """Advisory anomaly scoring. Never rejects; only annotates."""

    def __init__(self, thresholds: FraudThresholds | None = None):
        self._t = thresholds or FraudThresholds()

    def assess_risk(
        self,
        submission: AttendanceSubmission,
        history: FraudHistory,
        *,
        attended_at: datetime,
        now: datetime,
        tz: str,
    ) -> RiskAssessment:
        local = to_local(attended_at, tz)
        reasons: List[str] = []

        for reason in (
            self._location_drift(submission, history),
            self._time_drift(local, history),
            self._rapid_resubmission(now, history),
            "Weekend attendance" if is_weekend(local.date()) else None,
        ):
            if reason:
                reasons.append(reason)

        return RiskAssessment(
            suspicious=bool(reasons),
            reasons=tuple(reasons),
            risk_level=calculate_risk_level(len(reasons)),
        )

    def _location_drift(self, submission: AttendanceSubmission, history: FraudHistory) -> Optional[str]:
        location = submission.location
        points = [h for h in history.recent_locations if h.has_location]
        if location is None or not location.has_coordinates or not points:
            return None

        max_distance = max(
            haversine_distance(location.latitude, location.longitude, h.latitude, h.longitude) for h in points
        )
        if max_distance > self._t.location_drift_m:
            return (
                "Unusual location pattern: "
                f"Location {round(max_distance)}m away from usual locations"
            )
        return None

    def _time_drift(self, local: datetime, history: FraudHistory) -> Optional[str]:
        hours = [parse_hhmm(h.clock_in).hour for h in history.recent_clock_ins if h.clock_in]
        if not hours:
            return None

        average = sum(hours) / len(hours)
        diff = abs(local.hour - average)
        if diff > self._t.time_drift_hours:
            return f"Unusual time pattern: {diff:g} hours different from average"
        return None

    def _rapid_resubmission(self, now: datetime, history: FraudHistory) -> Optional[str]:
        if history.last_created_at is None:
            return None
        if ensure_aware(now) - ensure_aware(history.last_created_at) < self._t.rapid_resubmission:
            return "Rapid successive attendance marking"
        return None
