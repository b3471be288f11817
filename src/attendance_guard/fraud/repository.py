from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SuspiciousActivityEntry


class SuspiciousActivityRepository(Protocol):
    def append(self, entry: SuspiciousActivityEntry) -> int:
        raise NotImplementedError

    def list_unresolved(self, *, tenant_id: str, limit: int = 200) -> Sequence[SuspiciousActivityEntry]:
        raise NotImplementedError

    def mark_resolved(self, *, entry_id: int, tenant_id: str) -> bool:
        raise NotImplementedError

    def get_by_id(self, entry_id: int) -> Optional[SuspiciousActivityEntry]:
        raise NotImplementedError
