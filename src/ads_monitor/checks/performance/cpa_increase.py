"""Check for rising cost per acquisition."""

import logging

from ...client.google_ads import GoogleAdsClient
from ...constants import CPA_INCREASE_CRITICAL, CPA_INCREASE_WARNING, CPA_MIN_CONVERSIONS
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase
from .periods import fetch_period_comparison


class CpaIncreaseCheck(CheckBase):
    """Compare the cost per conversion of the last 7 days with the week before."""

    CHECK_ID = "cpa_increase"
    CHECK_NAME = "CPA Increase"
    DESCRIPTION = "Detects a week-over-week increase in cost per acquisition"
    CATEGORY = CheckCategory.PERFORMANCE

    def __init__(
        self,
        warning_threshold: float = CPA_INCREASE_WARNING,
        critical_threshold: float = CPA_INCREASE_CRITICAL,
        min_conversions: float = CPA_MIN_CONVERSIONS,
    ) -> None:
        super().__init__()
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold
        self.min_conversions = min_conversions

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        warning = self.threshold(tenant, "cpa_increase_warning", self.warning_threshold)
        critical = self.threshold(tenant, "cpa_increase_critical", self.critical_threshold)

        try:
            current, previous = await fetch_period_comparison(client)

            if current.conversions < self.min_conversions:
                logger.debug("Insufficient conversions in current period for CPA analysis")
                return self.ok_result({
                    "message": "Too few conversions for CPA analysis",
                    "current_conversions": current.conversions,
                    "min_required": self.min_conversions,
                })

            if previous.conversions < self.min_conversions:
                logger.debug("Insufficient conversions in previous period for CPA comparison")
                return self.ok_result({
                    "message": "Too few conversions in the previous period for comparison",
                    "previous_conversions": previous.conversions,
                    "min_required": self.min_conversions,
                })

            current_cpa, previous_cpa = current.cpa, previous.cpa
            if previous_cpa <= 0:
                return self.ok_result({"message": "No spend in the previous period"})

            change = (current_cpa - previous_cpa) / previous_cpa
            change_percent = round(change * 100)
            difference = current_cpa - previous_cpa
            details = {
                "current_period": {**current.to_dict(), "cpa": round(current_cpa, 2)},
                "previous_period": {**previous.to_dict(), "cpa": round(previous_cpa, 2)},
                "cpa_change_percent": change_percent,
                "cpa_difference": round(difference, 2),
            }
            summary = (
                f"CPA +{change_percent}% compared with last week "
                f"(€{current_cpa:.2f} vs €{previous_cpa:.2f})"
            )

            if change >= critical:
                logger.warning(f"Critical CPA increase for {tenant.tenant_name}: +{change_percent}%")
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: critical CPA increase",
                        short_description=summary,
                        impact=(
                            f"You now pay €{difference:.2f} more per conversion than last week. "
                            f"At {current.conversions:.0f} conversions that is "
                            f"€{difference * current.conversions:.0f} of extra spend."
                        ),
                        suggested_actions=[
                            "Find the campaigns and ad groups with the largest CPA increase",
                            "Check whether quality scores dropped",
                            "Check whether competition increased (impression share lost to rank)",
                            "Review recent changes to audiences or targeting",
                            "Consider pausing poor keywords or reallocating budget",
                            "Check that landing pages work and show relevant content",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            if change >= warning:
                logger.info(f"CPA increase warning for {tenant.tenant_name}: +{change_percent}%")
                return self.warning_result(
                    1,
                    AlertData(
                        title="Google Ads: CPA increase",
                        short_description=summary,
                        impact=(
                            f"Cost per conversion rose from €{previous_cpa:.2f} to €{current_cpa:.2f}. "
                            f"Not critical yet, but the trend can escalate quickly."
                        ),
                        suggested_actions=[
                            "Identify which campaigns or keywords drive the CPA up",
                            "Check recent changes to campaign settings or bids",
                            "Check whether CTR dropped (possible ad fatigue)",
                            "Compare with seasonal patterns",
                            "Monitor the trend closely over the coming days",
                        ],
                        severity=Severity.HIGH,
                    ),
                    details,
                )

            return self.ok_result({
                "message": "No significant CPA increase",
                "current_cpa": round(current_cpa, 2),
                "previous_cpa": round(previous_cpa, 2),
                "change_percent": change_percent,
            })

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise
