from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

_TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MINUTES_PER_DAY = 24 * 60


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def is_iso_date(value: str) -> bool:
    return bool(value) and bool(_DATE_RE.match(value))


def is_clock_time(value: str) -> bool:
    """True for HH:MM or HH:MM:SS."""
    return bool(value) and bool(_TIME_RE.match(value))


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (seconds are accepted and dropped)."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    return time(hour=int(parts[0]), minute=int(parts[1]))


def minutes_of_day(value: str | time) -> int:
    if isinstance(value, str):
        value = parse_hhmm(value)
    return value.hour * 60 + value.minute


def format_hhmm(value: datetime | time) -> str:
    return value.strftime("%H:%M")


def format_duration(total_minutes: int) -> str:
    """Render minutes as H:MM, hours not zero-padded."""
    hours, minutes = divmod(int(total_minutes), 60)
    return f"{hours}:{minutes:02d}"


def calculate_work_hours(clock_in: str | None, clock_out: str | None) -> str:
    """Duration between two clock times.

    A clock-out earlier than the clock-in is an overnight shift, so 24h is
    added instead of returning a negative duration.
    """
    if not clock_in or not clock_out:
        return "0:00"

    start = minutes_of_day(clock_in)
    end = minutes_of_day(clock_out)
    if end >= start:
        total = end - start
    else:
        total = MINUTES_PER_DAY - start + end
    return format_duration(total)


def now_utc() -> datetime:
    """Current aware UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_local(value: datetime, tz_name: str) -> datetime:
    return ensure_aware(value).astimezone(ZoneInfo(tz_name))


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5
