"""Base class for monitoring checks."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Optional
import logging

from ..client.google_ads import GoogleAdsClient
from ..models.base import CheckCategory, CheckStatus
from ..models.checks import AlertData, CheckResult
from ..models.tenants import TenantConfig

logger = logging.getLogger(__name__)


def micros_to_amount(value: Any) -> float:
    """Convert an API micros value (often a string) to currency units."""
    if value in (None, ""):
        return 0.0
    return float(value) / 1_000_000


def to_int(value: Any) -> int:
    """Convert an API integer value (often a string) to int."""
    if value in (None, ""):
        return 0
    return int(float(value))


def to_float(value: Any) -> float:
    """Convert an API numeric value to float."""
    if value in (None, ""):
        return 0.0
    return float(value)


def relative_change(current: float, previous: float) -> float:
    """Relative change from previous to current.

    Growth from a zero baseline counts as 100% when anything was gained.
    """
    if previous > 0:
        return (current - previous) / previous
    return 1.0 if current > 0 else 0.0


class CheckBase(ABC):
    """Abstract base class for monitoring checks."""

    # Override these in subclasses
    CHECK_ID: str = ""
    CHECK_NAME: str = ""
    DESCRIPTION: str = ""
    CATEGORY: CheckCategory = CheckCategory.PERFORMANCE

    def __init__(self, config: Optional[dict] = None):
        """Initialize check with optional configuration."""
        self.config = config or {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def id(self) -> str:
        return self.CHECK_ID

    @property
    def name(self) -> str:
        return self.CHECK_NAME

    @property
    def description(self) -> str:
        return self.DESCRIPTION

    @property
    def category(self) -> CheckCategory:
        return self.CATEGORY

    @abstractmethod
    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        """Run the check against one tenant's account."""
        pass

    def threshold(self, tenant: TenantConfig, name: str, default):
        """Resolve a threshold from tenant overrides, check config, then default."""
        override = getattr(tenant.thresholds, name, None)
        if override is not None:
            return override
        return self.config.get(name, default)

    def fingerprint(self, tenant_id: str, day: Optional[date] = None) -> str:
        """Deduplication key for this check, tenant and day."""
        day = day or date.today()
        return f"{tenant_id}:{self.CHECK_ID}:{day.isoformat()}"

    def ok_result(self, details: Optional[Dict[str, Any]] = None) -> CheckResult:
        return CheckResult(
            check_id=self.CHECK_ID,
            status=CheckStatus.OK,
            count=0,
            details=details or {},
        )

    def warning_result(
        self,
        count: int,
        alert_data: AlertData,
        details: Optional[Dict[str, Any]] = None,
    ) -> CheckResult:
        return CheckResult(
            check_id=self.CHECK_ID,
            status=CheckStatus.WARNING,
            count=count,
            details=details or {},
            alert_data=alert_data,
        )

    def error_result(
        self,
        count: int,
        alert_data: AlertData,
        details: Optional[Dict[str, Any]] = None,
    ) -> CheckResult:
        return CheckResult(
            check_id=self.CHECK_ID,
            status=CheckStatus.ERROR,
            count=count,
            details=details or {},
            alert_data=alert_data,
        )
