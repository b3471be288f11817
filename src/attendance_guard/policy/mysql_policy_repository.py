from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional

from ..core import constants as c
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, time_column_to_hhmm
from .model import AttendanceRules, FraudThresholds, OfficeSite, TenantPolicy, WorkHoursPolicy
from .repository import PolicyRepository


def _hhmm(value: Any, default: str) -> str:
    return time_column_to_hhmm(value) or default


def _get(row: Dict[str, Any], key: str, default: Any) -> Any:
    value = row.get(key)
    return default if value is None else value


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, default_timezone: str = c.DEFAULT_TIMEZONE):
        self._conn_factory = conn_factory
        self._default_timezone = default_timezone

    def get_for_tenant(self, tenant_id: str) -> TenantPolicy:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT *
                FROM attendance_settings
                WHERE tenant_id=%s
                LIMIT 1
                """,
                (tenant_id,),
            )
            settings = fetchone(cur) or {}

            cur.execute(
                """
                SELECT name, latitude, longitude, radius_m, timezone
                FROM office_sites
                WHERE tenant_id=%s AND is_active=1
                ORDER BY site_id
                """,
                (tenant_id,),
            )
            site_rows = fetchall(cur)

        tz = settings.get("timezone") or self._default_timezone
        sites = tuple(
            OfficeSite(
                name=r["name"],
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                radius_m=float(r["radius_m"]),
                timezone=r.get("timezone") or tz,
            )
            for r in site_rows
        )
        return TenantPolicy(
            tenant_id=tenant_id,
            work_hours=self._work_hours(settings, tz),
            sites=sites,
            rules=self._rules(settings),
            fraud=self._fraud(settings),
        )

    def _work_hours(self, row: Dict[str, Any], tz: str) -> WorkHoursPolicy:
        return WorkHoursPolicy(
            start=_hhmm(row.get("work_start"), c.DEFAULT_WORK_START),
            end=_hhmm(row.get("work_end"), c.DEFAULT_WORK_END),
            flex_minutes=int(_get(row, "flex_minutes", c.DEFAULT_FLEX_MINUTES)),
            minimum_work_hours=int(_get(row, "minimum_work_hours", c.DEFAULT_MINIMUM_WORK_HOURS)),
            attendance_deadline=_hhmm(row.get("attendance_deadline"), c.DEFAULT_ATTENDANCE_DEADLINE),
            half_day_after_deadline=bool(_get(row, "half_day_after_deadline", False)),
            timezone=tz,
            lunch_break_start=_hhmm(row.get("lunch_break_start"), c.DEFAULT_LUNCH_BREAK_START),
            lunch_break_end=_hhmm(row.get("lunch_break_end"), c.DEFAULT_LUNCH_BREAK_END),
        )

    def _rules(self, row: Dict[str, Any]) -> AttendanceRules:
        return AttendanceRules(
            max_location_accuracy_m=float(_get(row, "max_location_accuracy_m", c.MAX_LOCATION_ACCURACY_M)),
            max_time_gap=timedelta(seconds=int(_get(row, "max_time_gap_seconds", c.MAX_TIME_GAP_SECONDS))),
            max_duplicate_interval=timedelta(
                seconds=int(_get(row, "max_duplicate_interval_seconds", c.MAX_DUPLICATE_INTERVAL_SECONDS))
            ),
            require_location_for_office=bool(_get(row, "require_location_for_office", True)),
            fraud_detection_enabled=bool(_get(row, "fraud_detection_enabled", True)),
        )

    def _fraud(self, row: Dict[str, Any]) -> FraudThresholds:
        rapid: Optional[int] = row.get("rapid_resubmission_seconds")
        return FraudThresholds(
            location_drift_m=float(_get(row, "location_drift_m", c.LOCATION_DRIFT_M)),
            time_drift_hours=float(_get(row, "time_drift_hours", c.TIME_DRIFT_HOURS)),
            rapid_resubmission=timedelta(seconds=int(rapid if rapid is not None else c.RAPID_RESUBMISSION_SECONDS)),
        )
