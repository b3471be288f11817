from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord, AttendanceSubmission
from ..attendance.repository import AttendanceRepository
from ..core.exceptions import NotFoundError
from ..policy.model import TenantPolicy
from .heuristics import FraudHeuristics
from .model import FraudHistory, RiskAssessment, SuspiciousActivityEntry
from .repository import SuspiciousActivityRepository

logger = logging.getLogger(__name__)


class FraudScreeningService:
    """Scores a committed record against the user's history and logs anomalies."""

    def __init__(self, attendance: AttendanceRepository, activities: SuspiciousActivityRepository):
        self._attendance = attendance
        self._activities = activities

    def load_history(
        self,
        *,
        tenant_id: str,
        username: str,
        policy: TenantPolicy,
        now: datetime,
        exclude_record_id: Optional[int] = None,
    ) -> FraudHistory:
        t = policy.fraud
        recent_locations = self._attendance.list_history(
            tenant_id=tenant_id,
            username=username,
            since=now - timedelta(days=t.location_lookback_days),
            limit=t.location_history_limit,
            with_location=True,
            exclude_record_id=exclude_record_id,
        )
        recent_clock_ins = self._attendance.list_history(
            tenant_id=tenant_id,
            username=username,
            since=now - timedelta(days=t.time_lookback_days),
            limit=t.time_history_limit,
            exclude_record_id=exclude_record_id,
        )
        last_created_at = recent_clock_ins[0].created_at if recent_clock_ins else None
        return FraudHistory(
            recent_locations=recent_locations,
            recent_clock_ins=recent_clock_ins,
            last_created_at=last_created_at,
        )

    def screen(
        self,
        record: AttendanceRecord,
        submission: AttendanceSubmission,
        policy: TenantPolicy,
        *,
        attended_at: datetime,
        now: datetime,
    ) -> RiskAssessment:
        history = self.load_history(
            tenant_id=record.tenant_id,
            username=record.username,
            policy=policy,
            now=now,
            exclude_record_id=record.record_id,
        )
        assessment = FraudHeuristics(policy.fraud).assess_risk(
            submission,
            history,
            attended_at=attended_at,
            now=now,
            tz=policy.work_hours.timezone,
        )
        if assessment.suspicious:
            logger.warning(
                "Suspicious attendance for %s/%s (risk=%s): %s",
                record.tenant_id,
                record.username,
                assessment.risk_level.value,
                "; ".join(assessment.reasons),
            )
            self._activities.append(
                SuspiciousActivityEntry(
                    entry_id=None,
                    tenant_id=record.tenant_id,
                    username=record.username,
                    record_id=record.record_id,
                    reasons=assessment.reasons,
                    risk_level=assessment.risk_level,
                    submission=submission.to_dict(),
                    created_at=now,
                )
            )
        return assessment

    def list_unresolved(self, tenant_id: str, *, limit: int = 200) -> Sequence[SuspiciousActivityEntry]:
        return self._activities.list_unresolved(tenant_id=tenant_id, limit=limit)

    def resolve(self, entry_id: int, tenant_id: str) -> SuspiciousActivityEntry:
        entry = self._activities.get_by_id(entry_id)
        if not entry or entry.tenant_id != tenant_id:
            raise NotFoundError("Suspicious activity entry not found")
        if not entry.resolved:
            self._activities.mark_resolved(entry_id=entry_id, tenant_id=tenant_id)
        return replace(entry, resolved=True)
