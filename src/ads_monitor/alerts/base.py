"""Alert engine interface."""

from abc import ABC, abstractmethod

from ..models.base import Platform
from ..models.checks import AlertOutcome, CheckResult


class AlertEngine(ABC):
    """Stores alerts raised by checks and resolves them once fixed."""

    @abstractmethod
    async def create_alert_from_check_result(
        self,
        tenant_id: str,
        tenant_name: str,
        platform: Platform,
        result: CheckResult,
    ) -> AlertOutcome:
        """Create an alert for a non-ok result unless one exists for today."""
        pass

    @abstractmethod
    async def auto_resolve_if_fixed(
        self,
        tenant_id: str,
        platform: Platform,
        check_id: str,
    ) -> int:
        """Resolve open alerts for a check that passes again.

        Returns:
            Number of alerts resolved
        """
        pass
