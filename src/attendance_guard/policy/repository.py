from __future__ import annotations

from typing import Protocol

from .model import TenantPolicy


class PolicyRepository(Protocol):
    def get_for_tenant(self, tenant_id: str) -> TenantPolicy:
        """Tenant configuration; unconfigured values fall back to defaults."""

        raise NotImplementedError
