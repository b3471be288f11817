from __future__ import annotations

from typing import Sequence

from ..core.enums import EventKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, dump_json, fetchall, load_json, to_db_datetime
from .model import AttendanceEvent
from .repository import EventOutbox


class MySQLEventOutbox(EventOutbox):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def publish(self, event: AttendanceEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_events(kind, tenant_id, username, record_id, payload, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.kind.value,
                    event.tenant_id,
                    event.username,
                    event.record_id,
                    dump_json(event.payload),
                    to_db_datetime(event.created_at) if event.created_at else None,
                ),
            )
            return int(cur.lastrowid)

    def list_pending(self, *, tenant_id: str, limit: int = 100) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT kind, tenant_id, username, record_id, payload, created_at
                FROM attendance_events
                WHERE tenant_id=%s AND dispatched_at IS NULL
                ORDER BY event_id
                LIMIT %s
                """,
                (tenant_id, int(limit)),
            )
            return [
                AttendanceEvent(
                    kind=EventKind(r["kind"]),
                    tenant_id=r["tenant_id"],
                    username=r["username"],
                    record_id=r.get("record_id"),
                    payload=load_json(r.get("payload")) or {},
                    created_at=as_utc(r.get("created_at")),
                )
                for r in fetchall(cur)
            ]
