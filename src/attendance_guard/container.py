from __future__ import annotations

from dataclasses import dataclass

from .attendance.hooks import FraudScreeningHook, NotificationHook, StatisticsHook
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DatabaseConnection, DBConfig
from .events.mysql_event_outbox import MySQLEventOutbox
from .fraud.mysql_suspicious_activity_repository import MySQLSuspiciousActivityRepository
from .fraud.service import FraudScreeningService
from .policy.mysql_policy_repository import MySQLPolicyRepository
from .statistics.mysql_statistics_repository import MySQLStatisticsRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    policy_repo: MySQLPolicyRepository
    suspicious_repo: MySQLSuspiciousActivityRepository
    stats_repo: MySQLStatisticsRepository
    outbox: MySQLEventOutbox

    attendance_service: AttendanceService
    fraud_service: FraudScreeningService


def build_container(*, db_config: dict, default_timezone: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    policy_repo = MySQLPolicyRepository(conn, default_timezone=default_timezone)
    suspicious_repo = MySQLSuspiciousActivityRepository(conn)
    stats_repo = MySQLStatisticsRepository(conn)
    outbox = MySQLEventOutbox(conn)

    fraud_service = FraudScreeningService(attendance_repo, suspicious_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        policy_repo,
        hooks=[
            FraudScreeningHook(fraud_service, outbox),
            StatisticsHook(stats_repo),
            NotificationHook(outbox),
        ],
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        policy_repo=policy_repo,
        suspicious_repo=suspicious_repo,
        stats_repo=stats_repo,
        outbox=outbox,
        attendance_service=attendance_service,
        fraud_service=fraud_service,
    )
