from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import RiskLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, dump_json, fetchall, fetchone, load_json, to_db_datetime
from .model import SuspiciousActivityEntry
from .repository import SuspiciousActivityRepository

_COLUMNS = "entry_id, tenant_id, username, record_id, reasons, risk_level, submission, resolved, created_at"


def _to_entry(r: Dict[str, Any]) -> SuspiciousActivityEntry:
    return SuspiciousActivityEntry(
        entry_id=int(r["entry_id"]),
        tenant_id=r["tenant_id"],
        username=r["username"],
        record_id=int(r["record_id"]) if r.get("record_id") is not None else None,
        reasons=tuple(load_json(r.get("reasons")) or ()),
        risk_level=RiskLevel(r["risk_level"]),
        submission=load_json(r.get("submission")) or {},
        resolved=bool(r.get("resolved")),
        created_at=as_utc(r.get("created_at")),
    )


class MySQLSuspiciousActivityRepository(SuspiciousActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: SuspiciousActivityEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO suspicious_activities(tenant_id, username, record_id, reasons, risk_level, submission, resolved, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.tenant_id,
                    entry.username,
                    entry.record_id,
                    dump_json(list(entry.reasons)),
                    entry.risk_level.value,
                    dump_json(entry.submission),
                    int(entry.resolved),
                    to_db_datetime(entry.created_at) if entry.created_at else None,
                ),
            )
            return int(cur.lastrowid)

    def list_unresolved(self, *, tenant_id: str, limit: int = 200) -> Sequence[SuspiciousActivityEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM suspicious_activities
                WHERE tenant_id=%s AND resolved=0
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (tenant_id, int(limit)),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def mark_resolved(self, *, entry_id: int, tenant_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE suspicious_activities
                SET resolved=1
                WHERE entry_id=%s AND tenant_id=%s AND resolved=0
                """,
                (int(entry_id), tenant_id),
            )
            return cur.rowcount > 0

    def get_by_id(self, entry_id: int) -> Optional[SuspiciousActivityEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM suspicious_activities WHERE entry_id=%s",
                (int(entry_id),),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None
