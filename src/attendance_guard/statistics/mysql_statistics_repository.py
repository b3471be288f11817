from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchone, to_db_datetime
from .model import UserAttendanceStats
from .repository import StatisticsRepository


class MySQLStatisticsRepository(StatisticsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def increment_days_marked(
        self,
        *,
        tenant_id: str,
        username: str,
        current_month: str,
        attendance_date: date,
        updated_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_stats(tenant_id, username, current_month, total_days_marked, last_attendance_date, updated_at)
                VALUES(%s,%s,%s,1,%s,%s)
                ON DUPLICATE KEY UPDATE
                    current_month=VALUES(current_month),
                    total_days_marked=total_days_marked + 1,
                    last_attendance_date=VALUES(last_attendance_date),
                    updated_at=VALUES(updated_at)
                """,
                (tenant_id, username, current_month, attendance_date, to_db_datetime(updated_at)),
            )

    def get_for_user(self, *, tenant_id: str, username: str) -> Optional[UserAttendanceStats]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tenant_id, username, current_month, total_days_marked, last_attendance_date, updated_at
                FROM attendance_stats
                WHERE tenant_id=%s AND username=%s
                """,
                (tenant_id, username),
            )
            r = fetchone(cur)
            if not r:
                return None
            return UserAttendanceStats(
                tenant_id=r["tenant_id"],
                username=r["username"],
                current_month=r["current_month"],
                total_days_marked=int(r["total_days_marked"]),
                last_attendance_date=r.get("last_attendance_date"),
                updated_at=as_utc(r.get("updated_at")),
            )
