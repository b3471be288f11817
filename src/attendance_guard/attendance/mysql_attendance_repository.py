from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, WorkMode
from ..core.exceptions import DuplicateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, is_duplicate_key, to_db_datetime
from .model import (
    AttendanceRecord,
    DeviceInfo,
    HistoryEntry,
    LocationSnapshot,
    ValidationFlags,
    WorkScheduleFlags,
)
from .repository import AttendanceRepository, RecordQuery

_LOCATION_COLUMNS = ("latitude", "longitude", "accuracy", "address", "detected_site", "site_distance_m")

_COLUMNS = """
    record_id, tenant_id, username, work_date, work_mode, status,
    clock_in, clock_out, total_hours, expected_hours, notes,
    latitude, longitude, accuracy, address, detected_site, site_distance_m,
    expected_start, expected_end, is_late_arrival, is_early_arrival, is_flex_time,
    location_validated, fraud_check_passed, manual_override,
    user_agent, ip_address, fingerprint, created_at, updated_at
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = LocationSnapshot(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            accuracy=float(r["accuracy"]) if r.get("accuracy") is not None else None,
            address=r.get("address"),
            detected_site=r.get("detected_site"),
            site_distance_m=r.get("site_distance_m"),
        )

    schedule = None
    if r.get("expected_start"):
        schedule = WorkScheduleFlags(
            expected_start=r["expected_start"],
            expected_end=r["expected_end"],
            is_late_arrival=bool(r.get("is_late_arrival")),
            is_early_arrival=bool(r.get("is_early_arrival")),
            is_flex_time=bool(r.get("is_flex_time")),
        )

    return AttendanceRecord(
        record_id=int(r["record_id"]),
        tenant_id=r["tenant_id"],
        username=r["username"],
        work_date=r["work_date"],
        work_mode=WorkMode(r["work_mode"]),
        status=AttendanceStatus(r["status"]),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        total_hours=r.get("total_hours"),
        expected_hours=r.get("expected_hours"),
        notes=r.get("notes") or "",
        location=location,
        schedule=schedule,
        flags=ValidationFlags(
            location_validated=bool(r.get("location_validated")),
            fraud_check_passed=bool(r.get("fraud_check_passed")),
            manual_override=bool(r.get("manual_override")),
        ),
        device=DeviceInfo(
            user_agent=r.get("user_agent"),
            ip_address=r.get("ip_address"),
            fingerprint=r.get("fingerprint"),
        ),
        created_at=as_utc(r.get("created_at")),
        updated_at=as_utc(r.get("updated_at")),
    )


def _to_history(r: Dict[str, Any]) -> HistoryEntry:
    return HistoryEntry(
        record_id=int(r["record_id"]),
        work_date=r["work_date"],
        clock_in=r["clock_in"],
        created_at=as_utc(r["created_at"]),
        latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
        longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, *, tenant_id: str, username: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE tenant_id=%s AND username=%s AND work_date=%s
                LIMIT 1
                """,
                (tenant_id, username, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s",
                (int(record_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_latest_for_user(self, *, tenant_id: str, username: str) -> Optional[HistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, work_date, clock_in, created_at, latitude, longitude
                FROM attendance_records
                WHERE tenant_id=%s AND username=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (tenant_id, username),
            )
            r = fetchone(cur)
            return _to_history(r) if r else None

    def list_history(
        self,
        *,
        tenant_id: str,
        username: str,
        since: datetime,
        limit: int,
        with_location: bool = False,
        exclude_record_id: Optional[int] = None,
    ) -> Sequence[HistoryEntry]:
        clauses = ["tenant_id=%s", "username=%s", "created_at > %s"]
        params: list[object] = [tenant_id, username, to_db_datetime(since)]

        if with_location:
            clauses.append("latitude IS NOT NULL AND longitude IS NOT NULL")
        if exclude_record_id is not None:
            clauses.append("record_id <> %s")
            params.append(int(exclude_record_id))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, work_date, clock_in, created_at, latitude, longitude
                FROM attendance_records
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_history(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        loc = record.location
        sch = record.schedule
        params = (
            record.tenant_id,
            record.username,
            record.work_date,
            record.work_mode.value,
            record.status.value,
            record.clock_in,
            record.expected_hours,
            record.notes,
            loc.latitude if loc else None,
            loc.longitude if loc else None,
            loc.accuracy if loc else None,
            loc.address if loc else None,
            loc.detected_site if loc else None,
            loc.site_distance_m if loc else None,
            sch.expected_start if sch else None,
            sch.expected_end if sch else None,
            int(sch.is_late_arrival) if sch else 0,
            int(sch.is_early_arrival) if sch else 0,
            int(sch.is_flex_time) if sch else 0,
            int(record.flags.location_validated),
            int(record.flags.fraud_check_passed),
            int(record.flags.manual_override),
            record.device.user_agent,
            record.device.ip_address,
            record.device.fingerprint,
            to_db_datetime(record.created_at),
            to_db_datetime(record.updated_at or record.created_at),
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        tenant_id, username, work_date, work_mode, status,
                        clock_in, expected_hours, notes,
                        latitude, longitude, accuracy, address, detected_site, site_distance_m,
                        expected_start, expected_end, is_late_arrival, is_early_arrival, is_flex_time,
                        location_validated, fraud_check_passed, manual_override,
                        user_agent, ip_address, fingerprint, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    params,
                )
                record_id = int(cur.lastrowid)
        except IntegrityError as err:
            if is_duplicate_key(err):
                raise DuplicateError("Attendance already marked for today") from err
            raise
        return replace(record, record_id=record_id)

    def close_day(self, *, record_id: int, clock_out: str, total_hours: str, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, total_hours=%s, updated_at=%s
                WHERE record_id=%s AND clock_out IS NULL
                """,
                (clock_out, total_hours, to_db_datetime(updated_at), int(record_id)),
            )
            return cur.rowcount > 0

    def admin_update(
        self,
        *,
        record_id: int,
        work_date: date,
        clock_in: Optional[str],
        clock_out: Optional[str],
        total_hours: Optional[str],
        status: str,
        work_mode: str,
        notes: str,
        clear_location: bool,
        updated_at: datetime,
    ) -> bool:
        assignments = [
            "work_date=%s",
            "clock_in=%s",
            "clock_out=%s",
            "total_hours=%s",
            "status=%s",
            "work_mode=%s",
            "notes=%s",
            "manual_override=1",
            "updated_at=%s",
        ]
        if clear_location:
            assignments += [f"{col}=NULL" for col in _LOCATION_COLUMNS] + ["location_validated=0"]

        sql = f"UPDATE attendance_records SET {', '.join(assignments)} WHERE record_id=%s"
        params = (work_date, clock_in, clock_out, total_hours, status, work_mode, notes, to_db_datetime(updated_at), int(record_id))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(sql, params)
                return cur.rowcount > 0
        except IntegrityError as err:
            if is_duplicate_key(err):
                raise DuplicateError(f"Attendance already exists for {work_date.isoformat()}") from err
            raise

    def list_records(self, query: RecordQuery) -> Sequence[AttendanceRecord]:
        clauses = ["tenant_id=%s", "username=%s"]
        params: list[object] = [query.tenant_id, query.username]

        if query.start_date is not None:
            clauses.append("work_date >= %s")
            params.append(query.start_date)
        if query.end_date is not None:
            clauses.append("work_date <= %s")
            params.append(query.end_date)

        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE {' AND '.join(clauses)}
            ORDER BY work_date DESC
        """
        if query.limit:
            sql += " LIMIT %s"
            params.append(int(query.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def list_closed_present(self, *, tenant_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE tenant_id=%s AND status=%s AND clock_out IS NOT NULL
                ORDER BY record_id
                """,
                (tenant_id, AttendanceStatus.PRESENT.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def set_total_hours(self, *, record_id: int, total_hours: str, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET total_hours=%s, updated_at=%s
                WHERE record_id=%s
                """,
                (total_hours, to_db_datetime(updated_at), int(record_id)),
            )
            return cur.rowcount > 0
