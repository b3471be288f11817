from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import AttendanceStatus, WorkMode


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None
    captured_at: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    fingerprint: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSubmission:
    """Incoming marking request. Not persisted as-is."""

    username: str
    work_mode: str
    location: Optional[GeoLocation] = None
    notes: str = ""
    timestamp: Optional[datetime] = None
    device: DeviceInfo = field(default_factory=DeviceInfo)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LocationSnapshot:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None
    detected_site: Optional[str] = None
    site_distance_m: Optional[int] = None


@dataclass(frozen=True)
class WorkScheduleFlags:
    expected_start: str
    expected_end: str
    is_late_arrival: bool = False
    is_early_arrival: bool = False
    is_flex_time: bool = False


@dataclass(frozen=True)
class ValidationFlags:
    location_validated: bool = False
    fraud_check_passed: bool = True
    manual_override: bool = False


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day."""

    record_id: Optional[int]
    tenant_id: str
    username: str
    work_date: date
    work_mode: WorkMode
    status: AttendanceStatus
    clock_in: Optional[str]
    clock_out: Optional[str] = None
    total_hours: Optional[str] = None
    expected_hours: Optional[int] = None
    notes: str = ""
    location: Optional[LocationSnapshot] = None
    schedule: Optional[WorkScheduleFlags] = None
    flags: ValidationFlags = field(default_factory=ValidationFlags)
    device: DeviceInfo = field(default_factory=DeviceInfo)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        return self.clock_out is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["work_date"] = self.work_date.strftime("%Y-%m-%d")
        data["work_mode"] = self.work_mode.value
        data["status"] = self.status.value
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data


@dataclass(frozen=True)
class HistoryEntry:
    """Read-model used by the duplicate guard and fraud heuristics."""

    record_id: int
    work_date: date
    clock_in: Optional[str]
    created_at: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
