"""Best-effort side effects that run after a record is committed.

Each hook is isolated: a failure is logged and the remaining hooks still
run. Nothing raised here ever reaches the caller of the attendance service.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..common.datetime_utils import to_local
from ..core.enums import EventKind
from ..events.model import AttendanceEvent
from ..events.repository import EventOutbox
from ..fraud.service import FraudScreeningService
from ..policy.model import TenantPolicy
from ..statistics.repository import StatisticsRepository
from .model import AttendanceRecord, AttendanceSubmission

logger = logging.getLogger(__name__)

MARKED = "marked"
CLOSED = "closed"


@dataclass(frozen=True)
class PostCommitContext:
    action: str
    record: AttendanceRecord
    policy: TenantPolicy
    now: datetime
    submission: Optional[AttendanceSubmission] = None
    attended_at: Optional[datetime] = None


PostCommitHook = Callable[[PostCommitContext], None]


class FraudScreeningHook:
    def __init__(self, screening: FraudScreeningService, outbox: Optional[EventOutbox] = None):
        self._screening = screening
        self._outbox = outbox

    def __call__(self, ctx: PostCommitContext) -> None:
        if ctx.action != MARKED or ctx.submission is None or not ctx.policy.rules.fraud_detection_enabled:
            return

        assessment = self._screening.screen(
            ctx.record,
            ctx.submission,
            ctx.policy,
            attended_at=ctx.attended_at or ctx.now,
            now=ctx.now,
        )
        if assessment.suspicious and self._outbox is not None:
            self._outbox.publish(
                AttendanceEvent(
                    kind=EventKind.SUSPICIOUS_ACTIVITY,
                    tenant_id=ctx.record.tenant_id,
                    username=ctx.record.username,
                    record_id=ctx.record.record_id,
                    payload={"reasons": list(assessment.reasons), "risk_level": assessment.risk_level.value},
                    created_at=ctx.now,
                )
            )


class StatisticsHook:
    def __init__(self, stats: StatisticsRepository):
        self._stats = stats

    def __call__(self, ctx: PostCommitContext) -> None:
        if ctx.action != MARKED:
            return
        local = to_local(ctx.now, ctx.policy.work_hours.timezone)
        self._stats.increment_days_marked(
            tenant_id=ctx.record.tenant_id,
            username=ctx.record.username,
            current_month=local.strftime("%Y-%m"),
            attendance_date=ctx.record.work_date,
            updated_at=ctx.now,
        )


class NotificationHook:
    """Turns committed records into notification intents for the dispatcher."""

    def __init__(self, outbox: EventOutbox):
        self._outbox = outbox

    def __call__(self, ctx: PostCommitContext) -> None:
        record = ctx.record
        for kind, payload in self._intents(ctx):
            self._outbox.publish(
                AttendanceEvent(
                    kind=kind,
                    tenant_id=record.tenant_id,
                    username=record.username,
                    record_id=record.record_id,
                    payload=payload,
                    created_at=ctx.now,
                )
            )

    def _intents(self, ctx: PostCommitContext):
        record = ctx.record
        if ctx.action == CLOSED:
            yield EventKind.CLOCKED_OUT, {"clock_out": record.clock_out, "total_hours": record.total_hours}
            return

        yield EventKind.ATTENDANCE_MARKED, {
            "work_mode": record.work_mode.value,
            "date": record.work_date.isoformat(),
            "clock_in": record.clock_in,
            "has_location": record.location is not None,
            "site_detected": record.location.detected_site if record.location else None,
        }
        if record.schedule and record.schedule.is_late_arrival:
            yield EventKind.LATE_ARRIVAL, {"clock_in": record.clock_in, "expected_start": record.schedule.expected_start}
        yield EventKind.CHECKOUT_REMINDER, {"expected_end": ctx.policy.work_hours.end}


def run_post_commit_hooks(hooks: Iterable[PostCommitHook], ctx: PostCommitContext) -> List[str]:
    """Run every hook; return the names of those that failed."""

    failed: List[str] = []
    for hook in hooks:
        name = getattr(hook, "__name__", type(hook).__name__)
        try:
            hook(ctx)
        except Exception:
            logger.exception(
                "Post-commit hook %s failed for %s/%s record=%s",
                name,
                ctx.record.tenant_id,
                ctx.record.username,
                ctx.record.record_id,
            )
            failed.append(name)
    return failed
