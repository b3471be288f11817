from __future__ import annotations

import logging
from datetime import datetime

from ..common.datetime_utils import ensure_aware, minutes_of_day, to_local
from ..common.validators import require_non_empty
from ..core.enums import WorkMode
from ..core.exceptions import ValidationError
from ..policy.model import TenantPolicy
from .model import AttendanceSubmission
from .schedule import is_within_work_hours

logger = logging.getLogger(__name__)


class AttendanceValidator:
    """Admission checks run before anything touches storage.

    Checks short-circuit on the first failure, in this order: username,
    work mode, timestamp drift against server time, tenant-local work-hour
    window, and location accuracy for office submissions.
    """

    def validate(self, submission: AttendanceSubmission, policy: TenantPolicy, *, now: datetime) -> datetime:
        """Return the effective (aware) attendance time, or raise ValidationError."""

        require_non_empty(submission.username, "username")

        work_mode = WorkMode.parse(submission.work_mode)
        if work_mode is None:
            raise ValidationError('Work mode must be "office" or "remote"')

        now = ensure_aware(now)
        attended_at = ensure_aware(submission.timestamp) if submission.timestamp else now
        if abs(now - attended_at) > policy.rules.max_time_gap:
            raise ValidationError("Attendance timestamp is too far from current time")

        local = to_local(attended_at, policy.work_hours.timezone)
        window = is_within_work_hours(minutes_of_day(local.time()), policy.work_hours)
        if not window.valid:
            raise ValidationError(f"Attendance outside work hours: {window.message}")

        location = submission.location
        max_accuracy = policy.rules.max_location_accuracy_m
        if (
            work_mode == WorkMode.OFFICE
            and location is not None
            and location.accuracy is not None
            and location.accuracy > max_accuracy
        ):
            raise ValidationError(
                f"Location accuracy too low: {location.accuracy:g}m (max: {max_accuracy:g}m)"
            )

        return attended_at
