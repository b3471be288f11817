from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.datetime_utils import (
    calculate_work_hours,
    ensure_aware,
    format_hhmm,
    minutes_of_day,
    now_utc,
    parse_hhmm,
    parse_iso_date,
    to_local,
)
from ..common.validators import require_non_empty, validate_record_fields
from ..core.enums import AttendanceStatus, WorkMode
from ..core.exceptions import AlreadyClosedError, AuthorizationError, DomainError, NotFoundError, ValidationError
from ..policy.model import TenantPolicy
from ..policy.repository import PolicyRepository
from .duplicate_guard import DuplicateGuard
from .factory import AttendanceStrategyFactory
from .geofence import GeofenceChecker, SiteMatch, detect_site
from .hooks import CLOSED, MARKED, PostCommitContext, PostCommitHook, run_post_commit_hooks
from .model import AttendanceRecord, AttendanceSubmission, LocationSnapshot, ValidationFlags
from .repository import AttendanceRepository, RecordQuery
from .schedule import compute_schedule_flags
from .validator import AttendanceValidator

logger = logging.getLogger(__name__)

_NOT_WORKED = (AttendanceStatus.ABSENT, AttendanceStatus.HOLIDAY)


def _normalize_clock(value: Optional[str]) -> Optional[str]:
    return format_hhmm(parse_hhmm(value)) if value else None


class AttendanceService:
    """Marks, closes and corrects daily attendance records.

    Marking runs validator -> duplicate guard -> geofence (office only) ->
    conditional insert, then hands the committed record to the post-commit
    hooks (fraud screening, statistics, notification intents).
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        policies: PolicyRepository,
        *,
        hooks: Sequence[PostCommitHook] = (),
        validator: AttendanceValidator | None = None,
        geofence: GeofenceChecker | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._policies = policies
        self._hooks = list(hooks)
        self._validator = validator or AttendanceValidator()
        self._guard = DuplicateGuard(attendance)
        self._geofence = geofence or GeofenceChecker()
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def mark_attendance(
        self,
        submission: AttendanceSubmission,
        tenant_id: str,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = ensure_aware(now or now_utc())
        tenant_id = require_non_empty(tenant_id, "tenant ID")
        policy = self._policies.get_for_tenant(tenant_id)

        try:
            record, attended_at = self._admit(submission, policy, now=now)
            record = self._attendance.create(record)
        except DomainError as e:
            logger.info("Attendance rejected for %s/%s: %s", tenant_id, submission.username, e)
            raise

        logger.info(
            "Attendance marked for %s/%s on %s at %s (record=%s)",
            tenant_id,
            record.username,
            record.work_date,
            record.clock_in,
            record.record_id,
        )
        run_post_commit_hooks(
            self._hooks,
            PostCommitContext(
                action=MARKED,
                record=record,
                policy=policy,
                now=now,
                submission=submission,
                attended_at=attended_at,
            ),
        )
        return record

    def _admit(self, submission: AttendanceSubmission, policy: TenantPolicy, *, now: datetime):
        attended_at = self._validator.validate(submission, policy, now=now)
        username = submission.username.strip()
        work_mode = WorkMode.parse(submission.work_mode)
        local = to_local(attended_at, policy.work_hours.timezone)

        self._guard.ensure_not_duplicate(
            username=username,
            tenant_id=policy.tenant_id,
            work_date=local.date(),
            now=now,
            rules=policy.rules,
        )

        match: Optional[SiteMatch] = None
        if work_mode == WorkMode.OFFICE and policy.rules.require_location_for_office:
            match = self._geofence.check_location(submission.location, policy.sites)

        record = self._build_record(submission, policy, username=username, work_mode=work_mode, local=local, match=match, now=now)
        return record, attended_at

    def _build_record(
        self,
        submission: AttendanceSubmission,
        policy: TenantPolicy,
        *,
        username: str,
        work_mode: WorkMode,
        local: datetime,
        match: Optional[SiteMatch],
        now: datetime,
    ) -> AttendanceRecord:
        hours = policy.work_hours
        minute = minutes_of_day(local.time())

        decision = self._factory.for_checkin(minute=minute, policy=hours).decide_checkin(minute=minute, policy=hours)
        schedule = compute_schedule_flags(minute, hours)
        if decision.is_late and not schedule.is_late_arrival:
            schedule = replace(schedule, is_late_arrival=True)

        location = None
        loc = submission.location
        if loc is not None and loc.has_coordinates:
            if match is None and work_mode == WorkMode.OFFICE:
                match = detect_site(loc, policy.sites)
            location = LocationSnapshot(
                latitude=loc.latitude,
                longitude=loc.longitude,
                accuracy=loc.accuracy,
                address=loc.address,
                detected_site=match.site.name if match else None,
                site_distance_m=round(match.distance_m) if match else None,
            )

        notes = (submission.notes or "").strip()
        if decision.note:
            notes = f"{notes} | {decision.note}" if notes else decision.note

        return AttendanceRecord(
            record_id=None,
            tenant_id=policy.tenant_id,
            username=username,
            work_date=local.date(),
            work_mode=work_mode,
            status=decision.status,
            clock_in=format_hhmm(local),
            expected_hours=hours.minimum_work_hours,
            notes=notes,
            location=location,
            schedule=schedule,
            flags=ValidationFlags(location_validated=match is not None),
            device=submission.device,
            created_at=now,
            updated_at=now,
        )

    def check_out(self, username: str, tenant_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = ensure_aware(now or now_utc())
        username = require_non_empty(username, "username")
        tenant_id = require_non_empty(tenant_id, "tenant ID")
        policy = self._policies.get_for_tenant(tenant_id)
        local = to_local(now, policy.work_hours.timezone)

        record = self._attendance.get_for_user_and_date(tenant_id=tenant_id, username=username, work_date=local.date())
        if not record:
            raise NotFoundError("No attendance record found for today. Please clock in first.")
        if record.is_closed:
            raise AlreadyClosedError("Already clocked out for today")
        if not record.clock_in:
            raise ValidationError(f"Attendance for today is recorded as {record.status.value}")

        clock_out = format_hhmm(local)
        total_hours = calculate_work_hours(record.clock_in, clock_out)
        if not self._attendance.close_day(record_id=record.record_id, clock_out=clock_out, total_hours=total_hours, updated_at=now):
            raise AlreadyClosedError("Already clocked out for today")

        closed = replace(record, clock_out=clock_out, total_hours=total_hours, updated_at=now)
        logger.info("Clocked out %s/%s at %s (%s)", tenant_id, username, clock_out, total_hours)
        run_post_commit_hooks(self._hooks, PostCommitContext(action=CLOSED, record=closed, policy=policy, now=now))
        return closed

    def get_today_record(self, username: str, tenant_id: str, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        username = require_non_empty(username, "username")
        tenant_id = require_non_empty(tenant_id, "tenant ID")
        policy = self._policies.get_for_tenant(tenant_id)
        today = to_local(ensure_aware(now or now_utc()), policy.work_hours.timezone).date()
        return self._attendance.get_for_user_and_date(tenant_id=tenant_id, username=username, work_date=today)

    def get_records(
        self,
        username: str,
        tenant_id: str,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> list[AttendanceRecord]:
        if limit is not None and limit <= 0:
            raise ValidationError("Limit must be a positive integer")
        query = RecordQuery(
            username=require_non_empty(username, "username"),
            tenant_id=require_non_empty(tenant_id, "tenant ID"),
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
        out = []
        for r in self._attendance.list_records(query):
            if not r.total_hours and r.clock_in and r.clock_out:
                r = replace(r, total_hours=calculate_work_hours(r.clock_in, r.clock_out))
            out.append(r)
        return out

    def update_record(
        self,
        record_id: int,
        tenant_id: str,
        changes: Mapping[str, Any],
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Administrative correction.

        Total hours are recomputed from whichever clock time changed. Marking a
        day absent or holiday clears its clock times, hours and location.
        """

        now = ensure_aware(now or now_utc())
        validate_record_fields(changes)

        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        if record.tenant_id != tenant_id:
            raise AuthorizationError("Unauthorized: Cannot update attendance from different organization")

        work_date = parse_iso_date(str(changes["date"])) if changes.get("date") else record.work_date
        status = AttendanceStatus(changes["status"]) if changes.get("status") else record.status
        work_mode = WorkMode.parse(changes["work_mode"]) if changes.get("work_mode") else record.work_mode
        notes = changes["notes"] if changes.get("notes") is not None else record.notes

        location = record.location
        if status in _NOT_WORKED:
            clock_in = clock_out = total_hours = location = None
        else:
            clock_in = _normalize_clock(changes.get("clock_in")) or record.clock_in
            clock_out = _normalize_clock(changes.get("clock_out")) or record.clock_out
            total_hours = record.total_hours
            if clock_out and (clock_in != record.clock_in or clock_out != record.clock_out or not total_hours):
                total_hours = calculate_work_hours(clock_in, clock_out)

        self._attendance.admin_update(
            record_id=record.record_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            status=status.value,
            work_mode=work_mode.value,
            notes=notes,
            clear_location=location is None and record.location is not None,
            updated_at=now,
        )
        logger.info("Record %s corrected by administrator (tenant=%s)", record_id, tenant_id)
        flags = replace(record.flags, manual_override=True)
        if location is None:
            flags = replace(flags, location_validated=False)
        return replace(
            record,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            status=status,
            work_mode=work_mode,
            notes=notes,
            location=location,
            flags=flags,
            updated_at=now,
        )

        logger.info("Record %s corrected by administrator (tenant=%s)", record_id, tenant_id)
        return replace(
            record,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            status=status,
            work_mode=work_mode,
            notes=notes,
            flags=replace(record.flags, manual_override=True),
            updated_at=now,
        )

    def recalculate_total_hours(self, tenant_id: str, *, now: datetime | None = None) -> Dict[str, Any]:
        """Repair pass: rewrite total hours that are missing or disagree with the clock times."""

        now = ensure_aware(now or now_utc())
        tenant_id = require_non_empty(tenant_id, "tenant ID")
        processed = fixed = 0

        for record in self._attendance.list_closed_present(tenant_id=tenant_id):
            processed += 1
            expected = calculate_work_hours(record.clock_in, record.clock_out)
            if record.total_hours != expected:
                self._attendance.set_total_hours(record_id=record.record_id, total_hours=expected, updated_at=now)
                fixed += 1

        logger.info("Total hours recalculated for tenant %s: %s of %s fixed", tenant_id, fixed, processed)
        return {
            "tenant_id": tenant_id,
            "records_processed": processed,
            "records_fixed": fixed,
            "completed_at": now.isoformat(),
        }
