"""Client directory interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from ..models.tenants import TenantConfig


class ClientDirectory(ABC):
    """Source of the tenants to monitor."""

    @abstractmethod
    def list_active_tenants(self) -> List[TenantConfig]:
        """Tenants that are connected and have monitoring enabled."""
        pass

    @abstractmethod
    def update_last_checked(self, tenant_id: str, timestamp: datetime) -> None:
        """Record when a tenant was last monitored."""
        pass
