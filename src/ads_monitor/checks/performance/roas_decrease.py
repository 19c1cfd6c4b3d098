"""Check for declining return on ad spend."""

import logging

from ...client.google_ads import GoogleAdsClient
from ...constants import (
    ROAS_DECREASE_CRITICAL,
    ROAS_DECREASE_WARNING,
    ROAS_MIN_SPEND,
    ROAS_MIN_VALUE,
)
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase
from .periods import fetch_period_comparison


class RoasDecreaseCheck(CheckBase):
    """Compare revenue per euro spent with the week before.

    Only meaningful for accounts that track monetary conversion values.
    """

    CHECK_ID = "roas_decrease"
    CHECK_NAME = "ROAS Decrease"
    DESCRIPTION = "Detects a week-over-week decline in return on ad spend"
    CATEGORY = CheckCategory.PERFORMANCE

    def __init__(
        self,
        warning_threshold: float = ROAS_DECREASE_WARNING,
        critical_threshold: float = ROAS_DECREASE_CRITICAL,
        min_spend: float = ROAS_MIN_SPEND,
        min_value: float = ROAS_MIN_VALUE,
    ) -> None:
        super().__init__()
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold
        self.min_spend = min_spend
        self.min_value = min_value

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        warning = self.threshold(tenant, "roas_decrease_warning", self.warning_threshold)
        critical = self.threshold(tenant, "roas_decrease_critical", self.critical_threshold)

        try:
            current, previous = await fetch_period_comparison(client)

            if current.conversions_value == 0 and previous.conversions_value == 0:
                logger.debug(f"No conversion value tracking for {tenant.tenant_name}, skipping ROAS check")
                return self.ok_result({"message": "No conversion value tracking (not applicable)"})

            if current.cost < self.min_spend or previous.cost < self.min_spend:
                return self.ok_result({
                    "message": "Too little spend for a reliable ROAS analysis",
                    "current_spend": round(current.cost, 2),
                    "previous_spend": round(previous.cost, 2),
                    "min_required": self.min_spend,
                })

            if current.conversions_value < self.min_value and previous.conversions_value < self.min_value:
                return self.ok_result({
                    "message": "Conversion value too low for a meaningful ROAS analysis",
                    "current_value": round(current.conversions_value, 2),
                    "previous_value": round(previous.conversions_value, 2),
                })

            current_roas, previous_roas = current.roas, previous.roas
            change = (current_roas - previous_roas) / previous_roas if previous_roas > 0 else 0.0
            change_percent = round(change * 100)

            expected_revenue = current.cost * previous_roas
            lost_revenue = max(0.0, expected_revenue - current.conversions_value)

            details = {
                "current_period": {**current.to_dict(), "roas": round(current_roas, 2)},
                "previous_period": {**previous.to_dict(), "roas": round(previous_roas, 2)},
                "roas_change_percent": change_percent,
                "lost_revenue": round(lost_revenue, 2),
            }

            if previous_roas > 1 and current_roas < 0.5:
                logger.warning(
                    f"ROAS collapsed for {tenant.tenant_name}: {previous_roas:.2f} -> {current_roas:.2f}"
                )
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: ROAS collapsed",
                        short_description=f"ROAS fell from {previous_roas:.2f} to {current_roas:.2f}",
                        impact=(
                            f"Every euro spent now returns only €{current_roas:.2f}. "
                            f"Estimated missed revenue: €{lost_revenue:.0f}. Urgent action required."
                        ),
                        suggested_actions=[
                            "Check that conversion value tracking still works",
                            "Check for changes in product prices or the checkout",
                            "Identify campaigns with the largest decline",
                            "Pause campaigns with negative ROI to limit further losses",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            summary = (
                f"ROAS {change_percent}% compared with last week "
                f"({current_roas:.2f} vs {previous_roas:.2f})"
            )

            if change <= -critical:
                logger.warning(f"Critical ROAS decrease for {tenant.tenant_name}: {change_percent}%")
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: severe ROAS decline",
                        short_description=summary,
                        impact=(
                            f"At the old ROAS this spend would have produced €{expected_revenue:.0f} revenue, "
                            f"but only €{current.conversions_value:.0f} was realised. "
                            f"That is €{lost_revenue:.0f} of potentially missed revenue."
                        ),
                        suggested_actions=[
                            "Identify which campaigns show the largest ROAS decline",
                            "Check bid strategies and target ROAS settings",
                            "Check product feed and pricing changes",
                            "Compare with historical and seasonal patterns",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            if change <= -warning:
                logger.info(f"ROAS decrease warning for {tenant.tenant_name}: {change_percent}%")
                return self.warning_result(
                    1,
                    AlertData(
                        title="Google Ads: ROAS decline",
                        short_description=summary,
                        impact=(
                            f"Return on ad spend fell from {previous_roas:.2f} to {current_roas:.2f}. "
                            f"Estimated missed revenue: €{lost_revenue:.0f}."
                        ),
                        suggested_actions=[
                            "Find the campaigns driving the decline",
                            "Check recent bid or budget changes",
                            "Monitor the trend over the coming days",
                        ],
                        severity=Severity.HIGH,
                    ),
                    details,
                )

            return self.ok_result({
                "message": "No significant ROAS decline",
                "current_roas": round(current_roas, 2),
                "previous_roas": round(previous_roas, 2),
                "change_percent": change_percent,
            })

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise
