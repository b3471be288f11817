from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import EventKind


@dataclass(frozen=True)
class AttendanceEvent:
    """Intent handed to the notification dispatcher or admin review UI."""

    kind: EventKind
    tenant_id: str
    username: str
    record_id: Optional[int]
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
