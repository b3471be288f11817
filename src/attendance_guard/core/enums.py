from __future__ import annotations

from enum import Enum


class WorkMode(str, Enum):
    """Where the employee works from on a given day."""

    OFFICE = "office"
    REMOTE = "remote"

    @classmethod
    def parse(cls, value: str | None) -> "WorkMode | None":
        if not value:
            return None
        value = value.strip().lower()
        if value == "wfh":
            return cls.REMOTE
        try:
            return cls(value)
        except ValueError:
            return None


class AttendanceStatus(str, Enum):
    """Attendance status stored with each daily record."""

    PRESENT = "present"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    HOLIDAY = "holiday"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EventKind(str, Enum):
    """Notification-worthy events handed to the external dispatcher."""

    ATTENDANCE_MARKED = "attendance_marked"
    LATE_ARRIVAL = "late_arrival"
    CHECKOUT_REMINDER = "checkout_reminder"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"
    CLOCKED_OUT = "clocked_out"
