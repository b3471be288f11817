from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from .model import UserAttendanceStats


class StatisticsRepository(Protocol):
    def increment_days_marked(
        self,
        *,
        tenant_id: str,
        username: str,
        current_month: str,
        attendance_date: date,
        updated_at: datetime,
    ) -> None:
        raise NotImplementedError

    def get_for_user(self, *, tenant_id: str, username: str) -> Optional[UserAttendanceStats]:
        raise NotImplementedError
