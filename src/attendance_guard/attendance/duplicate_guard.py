from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.exceptions import DuplicateError
from ..policy.model import AttendanceRules
from .repository import AttendanceRepository


@dataclass(frozen=True)
class DuplicateCheck:
    duplicate: bool
    reason: Optional[str] = None


class DuplicateGuard:
    """Same-day and recent-interval double-marking checks.

    This is a read before the write; the repository's conditional insert is
    what closes the race between two concurrent submissions.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def check_duplicate(
        self,
        *,
        username: str,
        tenant_id: str,
        work_date: date,
        now: datetime,
        rules: AttendanceRules,
    ) -> DuplicateCheck:
        existing = self._attendance.get_for_user_and_date(tenant_id=tenant_id, username=username, work_date=work_date)
        if existing:
            reason = "Attendance already marked for today"
            if existing.clock_in:
                reason += f" at {existing.clock_in}"
            return DuplicateCheck(True, reason)

        latest = self._attendance.get_latest_for_user(tenant_id=tenant_id, username=username)
        if latest:
            elapsed = now - latest.created_at
            if elapsed < rules.max_duplicate_interval:
                minutes = round(max(elapsed, timedelta(0)).total_seconds() / 60)
                return DuplicateCheck(
                    True,
                    f"Too soon to mark attendance again. Last marked {minutes} minutes ago.",
                )

        return DuplicateCheck(False)

    def ensure_not_duplicate(self, **kwargs) -> None:
        check = self.check_duplicate(**kwargs)
        if check.duplicate:
            raise DuplicateError(check.reason)
