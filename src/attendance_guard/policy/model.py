from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Tuple

from ..core import constants as c


@dataclass(frozen=True)
class OfficeSite:
    """Registered physical site with a circular geofence."""

    name: str
    latitude: float
    longitude: float
    radius_m: float
    timezone: str = c.DEFAULT_TIMEZONE


@dataclass(frozen=True)
class WorkHoursPolicy:
    """Tenant-wide work schedule. Times are HH:MM in tenant-local time."""

    start: str = c.DEFAULT_WORK_START
    end: str = c.DEFAULT_WORK_END
    flex_minutes: int = c.DEFAULT_FLEX_MINUTES
    minimum_work_hours: int = c.DEFAULT_MINIMUM_WORK_HOURS
    attendance_deadline: str = c.DEFAULT_ATTENDANCE_DEADLINE
    half_day_after_deadline: bool = False
    timezone: str = c.DEFAULT_TIMEZONE
    lunch_break_start: str = c.DEFAULT_LUNCH_BREAK_START
    lunch_break_end: str = c.DEFAULT_LUNCH_BREAK_END


@dataclass(frozen=True)
class AttendanceRules:
    """Hard admission thresholds."""

    max_location_accuracy_m: float = c.MAX_LOCATION_ACCURACY_M
    max_time_gap: timedelta = timedelta(seconds=c.MAX_TIME_GAP_SECONDS)
    max_duplicate_interval: timedelta = timedelta(seconds=c.MAX_DUPLICATE_INTERVAL_SECONDS)
    require_location_for_office: bool = True
    fraud_detection_enabled: bool = True


@dataclass(frozen=True)
class FraudThresholds:
    """Soft anomaly thresholds for the fraud heuristics."""

    location_lookback_days: int = c.LOCATION_LOOKBACK_DAYS
    location_history_limit: int = c.LOCATION_HISTORY_LIMIT
    location_drift_m: float = c.LOCATION_DRIFT_M
    time_lookback_days: int = c.TIME_LOOKBACK_DAYS
    time_history_limit: int = c.TIME_HISTORY_LIMIT
    time_drift_hours: float = c.TIME_DRIFT_HOURS
    rapid_resubmission: timedelta = timedelta(seconds=c.RAPID_RESUBMISSION_SECONDS)


@dataclass(frozen=True)
class TenantPolicy:
    """Everything the engine needs to know about one tenant, loaded per request."""

    tenant_id: str
    work_hours: WorkHoursPolicy = field(default_factory=WorkHoursPolicy)
    sites: Tuple[OfficeSite, ...] = ()
    rules: AttendanceRules = field(default_factory=AttendanceRules)
    fraud: FraudThresholds = field(default_factory=FraudThresholds)
