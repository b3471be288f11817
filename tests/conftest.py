from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from attendance_guard.attendance.model import AttendanceRecord, HistoryEntry, LocationSnapshot
from attendance_guard.attendance.repository import RecordQuery
from attendance_guard.core.enums import AttendanceStatus, WorkMode
from attendance_guard.core.exceptions import DuplicateError
from attendance_guard.policy.model import OfficeSite, TenantPolicy, WorkHoursPolicy

TENANT = "acme"
TZ = "America/New_York"

MAIN_OFFICE = OfficeSite(name="Main Office", latitude=40.7128, longitude=-74.0060, radius_m=100, timezone=TZ)
BRANCH_OFFICE = OfficeSite(
    name="Branch Office", latitude=34.0522, longitude=-118.2437, radius_m=150, timezone="America/Los_Angeles"
)

# One meter of latitude, in degrees, on a 6,371 km sphere.
LAT_DEG_PER_M = 1 / 111_194.93


def ny(day: int, hour: int, minute: int = 0) -> datetime:
    """February 2026 wall-clock time in New York (EST, UTC-5) as aware UTC."""
    return datetime(2026, 2, day, tzinfo=timezone.utc) + timedelta(hours=hour + 5, minutes=minute)


class InMemoryAttendance:
    def __init__(self):
        self._records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def seed(self, record: AttendanceRecord) -> AttendanceRecord:
        self._id += 1
        record = replace(record, record_id=self._id)
        self._records[self._id] = record
        return record

    def all(self) -> list[AttendanceRecord]:
        return list(self._records.values())

    def _mine(self, tenant_id: str, username: str):
        return [r for r in self._records.values() if r.tenant_id == tenant_id and r.username == username]

    def get_for_user_and_date(self, *, tenant_id: str, username: str, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._mine(tenant_id, username):
            if r.work_date == work_date:
                return r
        return None

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(record_id)

    def _history(self, r: AttendanceRecord) -> HistoryEntry:
        return HistoryEntry(
            record_id=r.record_id,
            work_date=r.work_date,
            clock_in=r.clock_in,
            created_at=r.created_at,
            latitude=r.location.latitude if r.location else None,
            longitude=r.location.longitude if r.location else None,
        )

    def get_latest_for_user(self, *, tenant_id: str, username: str) -> Optional[HistoryEntry]:
        items = sorted(self._mine(tenant_id, username), key=lambda r: r.created_at, reverse=True)
        return self._history(items[0]) if items else None

    def list_history(self, *, tenant_id, username, since, limit, with_location=False, exclude_record_id=None):
        items = [
            r
            for r in self._mine(tenant_id, username)
            if r.created_at > since
            and r.record_id != exclude_record_id
            and (not with_location or r.location is not None)
        ]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return [self._history(r) for r in items[:limit]]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        if self.get_for_user_and_date(tenant_id=record.tenant_id, username=record.username, work_date=record.work_date):
            raise DuplicateError("Attendance already marked for today")
        return self.seed(record)

    def close_day(self, *, record_id, clock_out, total_hours, updated_at) -> bool:
        r = self._records.get(record_id)
        if not r or r.clock_out is not None:
            return False
        self._records[record_id] = replace(r, clock_out=clock_out, total_hours=total_hours, updated_at=updated_at)
        return True

    def admin_update(
        self, *, record_id, work_date, clock_in, clock_out, total_hours, status, work_mode, notes, clear_location, updated_at
    ) -> bool:
        r = self._records.get(record_id)
        if not r:
            return False
        clash = self.get_for_user_and_date(tenant_id=r.tenant_id, username=r.username, work_date=work_date)
        if clash and clash.record_id != record_id:
            raise DuplicateError(f"Attendance already exists for {work_date.isoformat()}")
        flags = replace(r.flags, manual_override=True)
        if clear_location:
            flags = replace(flags, location_validated=False)
        self._records[record_id] = replace(
            r,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=total_hours,
            status=AttendanceStatus(status),
            work_mode=WorkMode(work_mode),
            notes=notes,
            location=None if clear_location else r.location,
            flags=flags,
            updated_at=updated_at,
        )
        return True


    def list_records(self, query: RecordQuery):
        items = [
            r
            for r in self._mine(query.tenant_id, query.username)
            if (query.start_date is None or r.work_date >= query.start_date)
            and (query.end_date is None or r.work_date <= query.end_date)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[: query.limit] if query.limit else items

    def list_closed_present(self, *, tenant_id):
        return [
            r
            for r in self._records.values()
            if r.tenant_id == tenant_id and r.status == AttendanceStatus.PRESENT and r.clock_out
        ]

    def set_total_hours(self, *, record_id, total_hours, updated_at) -> bool:
        r = self._records[record_id]
        self._records[record_id] = replace(r, total_hours=total_hours, updated_at=updated_at)
        return True


class InMemoryPolicies:
    def __init__(self, *policies: TenantPolicy):
        self._by_tenant = {p.tenant_id: p for p in policies}

    def get_for_tenant(self, tenant_id: str) -> TenantPolicy:
        return self._by_tenant.get(tenant_id) or TenantPolicy(tenant_id=tenant_id)


class InMemorySuspicious:
    def __init__(self):
        self.entries = []

    def append(self, entry) -> int:
        entry = replace(entry, entry_id=len(self.entries) + 1)
        self.entries.append(entry)
        return entry.entry_id

    def list_unresolved(self, *, tenant_id, limit=200):
        return [e for e in self.entries if e.tenant_id == tenant_id and not e.resolved][:limit]

    def get_by_id(self, entry_id):
        return next((e for e in self.entries if e.entry_id == entry_id), None)

    def mark_resolved(self, *, entry_id, tenant_id) -> bool:
        for i, e in enumerate(self.entries):
            if e.entry_id == entry_id and e.tenant_id == tenant_id and not e.resolved:
                self.entries[i] = replace(e, resolved=True)
                return True
        return False


class InMemoryStats:
    def __init__(self):
        self.calls = []

    def increment_days_marked(self, **kwargs) -> None:
        self.calls.append(kwargs)

    def get_for_user(self, *, tenant_id, username):
        return None


class InMemoryOutbox:
    def __init__(self):
        self.events = []

    def publish(self, event) -> int:
        self.events.append(event)
        return len(self.events)

    def list_pending(self, *, tenant_id, limit=100):
        return [e for e in self.events if e.tenant_id == tenant_id][:limit]

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]


def make_record(
    *,
    username: str = "alice",
    work_date: date,
    clock_in: Optional[str] = "09:00",
    created_at: datetime,
    clock_out: Optional[str] = None,
    total_hours: Optional[str] = None,
    latitude: Optional[float] = MAIN_OFFICE.latitude,
    longitude: Optional[float] = MAIN_OFFICE.longitude,
    tenant_id: str = TENANT,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
) -> AttendanceRecord:
    location = None
    if latitude is not None and longitude is not None:
        location = LocationSnapshot(latitude=latitude, longitude=longitude, accuracy=10)
    return AttendanceRecord(
        record_id=None,
        tenant_id=tenant_id,
        username=username,
        work_date=work_date,
        work_mode=WorkMode.OFFICE,
        status=status,
        clock_in=clock_in,
        clock_out=clock_out,
        total_hours=total_hours,
        location=location,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def fixed_now() -> datetime:
    # Tuesday 2026-02-03 09:05 in New York.
    return ny(3, 9, 5)


@pytest.fixture
def policy() -> TenantPolicy:
    return TenantPolicy(
        tenant_id=TENANT,
        work_hours=WorkHoursPolicy(start="09:00", end="17:00", flex_minutes=30, timezone=TZ),
        sites=(MAIN_OFFICE, BRANCH_OFFICE),
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()
