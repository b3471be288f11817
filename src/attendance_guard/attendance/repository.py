from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, HistoryEntry


@dataclass(frozen=True)
class RecordQuery:
    username: str
    tenant_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    limit: Optional[int] = None


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, *, tenant_id: str, username: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_for_user(self, *, tenant_id: str, username: str) -> Optional[HistoryEntry]:
        raise NotImplementedError

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
        """Newest first, created after `since`."""

        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert conditioned on (tenant_id, username, work_date) being free.

        Raises DuplicateError when another record already holds the key.
        """

        raise NotImplementedError

    def close_day(self, *, record_id: int, clock_out: str, total_hours: str, updated_at: datetime) -> bool:
        """Set clock-out only while the record is still open."""

        raise NotImplementedError

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
        """Administrative correction; marks the record as manual override.

        Raises DuplicateError when ``work_date`` collides with another record
        of the same user.
        """

        raise NotImplementedError


    def list_records(self, query: RecordQuery) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_closed_present(self, *, tenant_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def set_total_hours(self, *, record_id: int, total_hours: str, updated_at: datetime) -> bool:
        raise NotImplementedError
