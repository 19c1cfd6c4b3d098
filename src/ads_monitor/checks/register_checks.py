"""Register all available checks with a registry."""

import logging

from .critical import DisapprovedAdsCheck, LandingPageErrorsCheck, PaymentIssuesCheck
from .delivery import BudgetDepletedCheck, LimitedByBudgetCheck, NoDeliveryCheck
from .hygiene import (
    AdGroupWithoutAdsCheck,
    KeywordConflictsCheck,
    LowAdStrengthCheck,
    LowQualityScoreCheck,
)
from .optimization import SearchTermWasteCheck
from .performance import (
    CpaIncreaseCheck,
    CpcSpikeCheck,
    PerformanceDropCheck,
    RoasDecreaseCheck,
    SpendWithoutValueCheck,
)
from .registry import CheckRegistry
from .tracking import ConversionTrackingCheck

logger = logging.getLogger(__name__)

# Run order: critical problems first, optimization last.
ALL_CHECKS = [
    PaymentIssuesCheck,
    DisapprovedAdsCheck,
    LandingPageErrorsCheck,
    NoDeliveryCheck,
    BudgetDepletedCheck,
    LimitedByBudgetCheck,
    ConversionTrackingCheck,
    PerformanceDropCheck,
    CpcSpikeCheck,
    CpaIncreaseCheck,
    RoasDecreaseCheck,
    SpendWithoutValueCheck,
    LowQualityScoreCheck,
    LowAdStrengthCheck,
    KeywordConflictsCheck,
    AdGroupWithoutAdsCheck,
    SearchTermWasteCheck,
]


def register_all_checks(registry: CheckRegistry) -> CheckRegistry:
    """Register one instance of every check."""
    for check_class in ALL_CHECKS:
        registry.register(check_class())
    logger.debug(f"Registered {len(registry)} checks")
    return registry


def create_default_registry() -> CheckRegistry:
    """Create a registry holding all checks in their run order."""
    return register_all_checks(CheckRegistry())
