"""Check for spend growth that conversions do not keep up with."""

import logging

from ...client.google_ads import GoogleAdsClient
from ...constants import (
    MIN_PERIOD_SPEND,
    SPEND_GROWTH_CRITICAL,
    SPEND_GROWTH_WARNING,
    SPEND_VALUE_CRITICAL_GROWTH,
    SPEND_VALUE_TOLERANCE,
)
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, relative_change
from .periods import fetch_period_comparison


class SpendWithoutValueCheck(CheckBase):
    """Flag weeks where spend grows faster than conversions or conversion value."""

    CHECK_ID = "spend_without_value"
    CHECK_NAME = "Spend Without Value"
    DESCRIPTION = "Detects spend increases without a matching increase in results"
    CATEGORY = CheckCategory.PERFORMANCE

    def __init__(
        self,
        warning_growth: float = SPEND_GROWTH_WARNING,
        critical_growth: float = SPEND_GROWTH_CRITICAL,
        tolerance: float = SPEND_VALUE_TOLERANCE,
        critical_value_growth: float = SPEND_VALUE_CRITICAL_GROWTH,
        min_period_spend: float = MIN_PERIOD_SPEND,
    ) -> None:
        super().__init__()
        self.warning_growth = warning_growth
        self.critical_growth = critical_growth
        self.tolerance = tolerance
        self.critical_value_growth = critical_value_growth
        self.min_period_spend = min_period_spend

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        warning = self.threshold(tenant, "spend_growth_warning", self.warning_growth)
        critical = self.threshold(tenant, "spend_growth_critical", self.critical_growth)
        min_spend = self.threshold(tenant, "min_period_spend", self.min_period_spend)

        try:
            current, previous = await fetch_period_comparison(client)

            if current.cost < min_spend or previous.cost < min_spend:
                return self.ok_result({
                    "message": "Too little spend for a reliable comparison",
                    "current_spend": round(current.cost, 2),
                    "previous_spend": round(previous.cost, 2),
                    "min_required": min_spend,
                })

            spend_change = (current.cost - previous.cost) / previous.cost
            if spend_change < warning:
                return self.ok_result({
                    "message": "No significant spend increase",
                    "spend_change_percent": round(spend_change * 100),
                })

            conv_change = relative_change(current.conversions, previous.conversions)
            value_change = relative_change(current.conversions_value, previous.conversions_value)
            tracks_value = current.conversions_value > 0 or previous.conversions_value > 0
            best_change = max(conv_change, value_change) if tracks_value else conv_change

            if best_change >= spend_change - self.tolerance:
                return self.ok_result({
                    "message": "Spend increase is matched by results",
                    "spend_change_percent": round(spend_change * 100),
                    "conversion_change_percent": round(conv_change * 100),
                    "value_change_percent": round(value_change * 100),
                })

            extra_spend = current.cost - previous.cost
            extra_conversions = current.conversions - previous.conversions
            shortfall = max(0.0, previous.conversions * spend_change - extra_conversions)
            if previous.conversions > 0:
                wasted = (shortfall / previous.conversions) * previous.cost
            else:
                wasted = extra_spend * (1 - best_change / spend_change)
            wasted = max(0.0, wasted)

            spend_pct = round(spend_change * 100)
            conv_pct = round(conv_change * 100)
            value_pct = round(value_change * 100)
            gap = round((spend_change - best_change) * 100)

            details = {
                "current_period": current.to_dict(),
                "previous_period": previous.to_dict(),
                "spend_change_percent": spend_pct,
                "conversion_change_percent": conv_pct,
                "value_change_percent": value_pct,
                "growth_gap": gap,
                "extra_spend": round(extra_spend, 2),
                "wasted_spend_estimate": round(wasted, 2),
            }

            results_text = f"conversions {conv_pct:+d}%"
            if tracks_value:
                results_text += f", value {value_pct:+d}%"
            summary = f"Spend +{spend_pct}% while {results_text}"

            if spend_change >= critical and best_change <= self.critical_value_growth:
                logger.warning(
                    f"Spend without value for {tenant.tenant_name}: spend +{spend_pct}%, best result {best_change:.0%}"
                )
                return self.error_result(
                    1,
                    AlertData(
                        title="Google Ads: spend rising without results",
                        short_description=summary,
                        impact=(
                            f"€{extra_spend:.0f} more was spent than last week with hardly any extra results. "
                            f"Estimated inefficient spend: €{wasted:.0f}."
                        ),
                        suggested_actions=[
                            "Check which campaigns caused the spend increase",
                            "Review recent budget and bid strategy changes",
                            "Check search terms for new irrelevant traffic",
                            "Verify that conversion tracking still fires",
                            "Roll back budget increases that do not pay off",
                        ],
                        severity=Severity.CRITICAL,
                    ),
                    details,
                )

            logger.info(f"Spend growth outpacing results for {tenant.tenant_name}: gap {gap} points")
            return self.warning_result(
                1,
                AlertData(
                    title="Google Ads: spend growing faster than results",
                    short_description=summary,
                    impact=(
                        f"Spend grew {gap} percentage points faster than results. "
                        f"Estimated inefficient spend: €{wasted:.0f}."
                    ),
                    suggested_actions=[
                        "Identify the campaigns with the largest spend growth",
                        "Compare cost per conversion per campaign with last week",
                        "Check for broad match expansion or new placements",
                        "Monitor whether results catch up in the coming days",
                    ],
                    severity=Severity.HIGH,
                ),
                details,
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise
