from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceEvent


class EventOutbox(Protocol):
    """Events are written here and picked up by an external dispatcher."""

    def publish(self, event: AttendanceEvent) -> int:
        raise NotImplementedError

    def list_pending(self, *, tenant_id: str, limit: int = 100) -> Sequence[AttendanceEvent]:
        raise NotImplementedError
