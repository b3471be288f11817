from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class UserAttendanceStats:
    tenant_id: str
    username: str
    current_month: str
    total_days_marked: int
    last_attendance_date: Optional[date] = None
    updated_at: Optional[datetime] = None
