"""Check for a week-over-week decline in conversions."""

import logging

from ...client.google_ads import GoogleAdsClient
from ...constants import PERFORMANCE_DROP_CRITICAL, PERFORMANCE_DROP_WARNING
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase
from .periods import fetch_period_comparison


class PerformanceDropCheck(CheckBase):
    """Compare conversions of the last 7 days with the 7 days before."""

    CHECK_ID = "performance_drop"
    CHECK_NAME = "Performance Drop"
    DESCRIPTION = "Detects a significant week-over-week decline in conversions"
    CATEGORY = CheckCategory.PERFORMANCE

    def __init__(
        self,
        warning_threshold: float = PERFORMANCE_DROP_WARNING,
        critical_threshold: float = PERFORMANCE_DROP_CRITICAL,
    ) -> None:
        """Initialize performance drop check.

        Args:
            warning_threshold: Relative decline that raises a warning
            critical_threshold: Relative decline that is critical
        """
        super().__init__()
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        warning = self.threshold(tenant, "performance_drop_warning", self.warning_threshold)
        critical = self.threshold(tenant, "performance_drop_critical", self.critical_threshold)

        try:
            current, previous = await fetch_period_comparison(client)

            # No baseline to compare against
            if previous.conversions <= 0:
                logger.debug("No conversions in previous period, skipping check")
                return self.ok_result({
                    "message": "No conversions in the previous period to compare with",
                    "current_conversions": current.conversions,
                    "previous_conversions": previous.conversions,
                })

            change = (current.conversions - previous.conversions) / previous.conversions
            change_percent = round(change * 100)
            details = {
                "current_period": current.to_dict(),
                "previous_period": previous.to_dict(),
                "change_percent": change_percent,
            }

            if current.conversions == 0:
                logger.warning(
                    f"No conversions in current period for {tenant.tenant_name} "
                    f"(previous period: {previous.conversions:.0f})"
                )
                details["change_percent"] = -100
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: conversions stopped",
                        short_description=(
                            f"0 conversions in the last 7 days (was {previous.conversions:.0f} the week before)"
                        ),
                        impact=(
                            f"There were no conversions in the last 7 days, compared with "
                            f"{previous.conversions:.0f} the week before. This points to a serious problem."
                        ),
                        suggested_actions=[
                            "Check that conversion tracking works",
                            "Check that campaigns are still active and have budget",
                            "Check whether bids are set too low",
                            "Check that landing pages work",
                            "Analyse whether the market has changed",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            if change <= -critical:
                logger.warning(f"Critical performance drop for {tenant.tenant_name}: {change_percent}%")
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: severe performance drop",
                        short_description=f"Conversions {change_percent}% compared with last week",
                        impact=(
                            f"Conversions fell from {previous.conversions:.1f} to {current.conversions:.1f} "
                            f"({change_percent}%). This is a critical decline that needs immediate action."
                        ),
                        suggested_actions=[
                            "Analyse which campaigns declined the most",
                            "Check whether budget limits were reached",
                            "Check for negative changes in quality scores",
                            "Check competitive pressure and market conditions",
                            "Compare with seasonal patterns",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            if change <= -warning:
                logger.info(f"Performance drop warning for {tenant.tenant_name}: {change_percent}%")
                return self.warning_result(
                    1,
                    AlertData(
                        title="Google Ads: performance drop",
                        short_description=f"Conversions {change_percent}% compared with last week",
                        impact=(
                            f"Conversions fell from {previous.conversions:.1f} to {current.conversions:.1f} "
                            f"({change_percent}%). Not critical yet, but it deserves attention."
                        ),
                        suggested_actions=[
                            "Find the campaigns or ad groups with the largest decline",
                            "Analyse whether this matches a seasonal pattern",
                            "Check recent changes to campaigns",
                            "Monitor the trend over the coming days",
                        ],
                        severity=Severity.HIGH,
                    ),
                    details,
                )

            logger.debug(f"No performance drop detected for {tenant.tenant_name}: {change_percent}%")
            return self.ok_result({
                "message": "No significant performance drop",
                "current_conversions": current.conversions,
                "previous_conversions": previous.conversions,
                "change_percent": change_percent,
            })

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise
