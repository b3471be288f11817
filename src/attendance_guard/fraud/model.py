from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from ..attendance.model import HistoryEntry
from ..core.enums import RiskLevel


@dataclass(frozen=True)
class FraudHistory:
    """Bounded snapshot of a user's past records, excluding the one being scored."""

    recent_locations: Sequence[HistoryEntry] = ()
    recent_clock_ins: Sequence[HistoryEntry] = ()
    last_created_at: Optional[datetime] = None


@dataclass(frozen=True)
class RiskAssessment:
    suspicious: bool
    reasons: Tuple[str, ...] = ()
    risk_level: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class SuspiciousActivityEntry:
    """Append-only review log entry. `resolved` is flipped by a human reviewer."""

    entry_id: Optional[int]
    tenant_id: str
    username: str
    record_id: Optional[int]
    reasons: Tuple[str, ...]
    risk_level: RiskLevel
    submission: Dict[str, Any] = field(default_factory=dict)
    resolved: bool = False
    created_at: Optional[datetime] = None
