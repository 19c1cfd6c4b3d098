"""Check for broken or missing conversion tracking."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import (
    HIGH_SPEND_THRESHOLD,
    TRACKING_ACCOUNT_MIN_COST,
    TRACKING_MIN_CLICKS,
    TRACKING_MIN_COST,
)
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_float, to_int

CONVERSIONS_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      metrics.conversions,
      metrics.all_conversions,
      metrics.cost_micros,
      metrics.clicks
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND segments.date DURING LAST_7_DAYS
"""

CONVERSION_ACTIONS_QUERY = """
    SELECT
      conversion_action.id,
      conversion_action.name,
      conversion_action.status,
      conversion_action.category,
      conversion_action.type
    FROM conversion_action
    WHERE conversion_action.status = 'ENABLED'
"""

TRACKING_ACTIONS = [
    "Check that the conversion tag is installed correctly",
    "Verify conversions with Google Tag Assistant",
    "Check that the conversion actions are configured correctly",
    "Review the attribution window settings",
    "Test a conversion manually to verify tracking",
    "Check that ad blockers or consent banners are not blocking tracking",
]


class ConversionTrackingCheck(CheckBase):
    """Detect spend that produces no measurable conversions at all.

    Zero conversions combined with real traffic usually means the tag broke,
    not that the traffic is worthless.
    """

    CHECK_ID = "conversion_tracking"
    CHECK_NAME = "Conversion Tracking"
    DESCRIPTION = "Detects missing conversion actions and spend without any recorded conversion"
    CATEGORY = CheckCategory.TRACKING

    def __init__(
        self,
        min_cost: float = TRACKING_MIN_COST,
        min_clicks: int = TRACKING_MIN_CLICKS,
        account_min_cost: float = TRACKING_ACCOUNT_MIN_COST,
    ) -> None:
        super().__init__()
        self.min_cost = min_cost
        self.min_clicks = min_clicks
        self.account_min_cost = account_min_cost

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        issues: List[Dict[str, Any]] = []

        try:
            has_conversion_actions = True
            try:
                actions = await client.query(CONVERSION_ACTIONS_QUERY)
                if not actions.results:
                    has_conversion_actions = False
                    issues.append({
                        "type": "no_conversion_actions",
                        "description": "No enabled conversion actions configured",
                        "severity": Severity.HIGH.value,
                    })
            except Exception as e:
                logger.debug(f"Could not query conversion actions: {e}")

            response = await client.query(CONVERSIONS_QUERY)

            if not response.results:
                if not has_conversion_actions:
                    return self.error_result(
                        1,
                        AlertData(
                            title="Google Ads: conversion tracking not set up",
                            short_description="No conversion tracking active",
                            impact="Without conversion tracking you cannot measure which campaigns deliver ROI",
                            suggested_actions=[
                                "Set up conversion tracking in Google Ads",
                                "Import conversions from Google Analytics 4",
                                "Install the Google Ads conversion tag",
                                "Configure offline conversion imports if applicable",
                            ],
                            severity=Severity.HIGH,
                            details={"has_conversion_actions": False},
                        ),
                        {"issues": issues},
                    )
                return self.ok_result({"message": "No campaign data for conversion analysis"})

            campaigns = self._aggregate(response.results)

            zero_conversion = [
                {"campaign_id": campaign_id, **data}
                for campaign_id, data in campaigns.items()
                if data["cost"] >= self.min_cost
                and data["clicks"] >= self.min_clicks
                and data["conversions"] == 0
                and data["all_conversions"] == 0
            ]

            for campaign in zero_conversion:
                issues.append({
                    "type": "zero_conversions",
                    "description": (
                        f"€{campaign['cost']:.2f} spent, {campaign['clicks']} clicks, 0 conversions"
                    ),
                    "campaign_name": campaign["name"],
                    "severity": (
                        Severity.CRITICAL.value if campaign["cost"] > HIGH_SPEND_THRESHOLD
                        else Severity.HIGH.value
                    ),
                })

            total_conversions = sum(data["conversions"] for data in campaigns.values())
            total_cost = sum(data["cost"] for data in campaigns.values())

            if total_conversions == 0 and total_cost > self.account_min_cost:
                issues.append({
                    "type": "account_zero_conversions",
                    "description": f"Account spent €{total_cost:.2f} without conversions (7 days)",
                    "severity": Severity.CRITICAL.value,
                })

            if not issues:
                logger.debug("No conversion tracking issues found")
                return self.ok_result({
                    "message": "Conversion tracking works",
                    "total_conversions": total_conversions,
                    "total_cost": round(total_cost, 2),
                })

            count = len(issues)
            has_critical = any(i["severity"] == Severity.CRITICAL.value for i in issues)
            zero_conversion_spend = sum(c["cost"] for c in zero_conversion)

            logger.warning(
                f"Found {count} conversion tracking issues for {tenant.tenant_name}: "
                f"{', '.join(i['type'] for i in issues)}"
            )

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: conversion tracking problems",
                    short_description=(
                        "Critical conversion tracking issues found"
                        if has_critical
                        else f"{count} potential tracking problem{'s' if count > 1 else ''}"
                    ),
                    impact=(
                        f"€{zero_conversion_spend:.2f} spent on campaigns without measurable conversions"
                        if zero_conversion_spend > 0
                        else "Conversion data may be unreliable"
                    ),
                    suggested_actions=list(TRACKING_ACTIONS),
                    severity=Severity.CRITICAL if has_critical else Severity.HIGH,
                    details={
                        "issue_count": count,
                        "has_conversion_actions": has_conversion_actions,
                        "total_conversions": total_conversions,
                        "total_cost": round(total_cost, 2),
                        "zero_conversion_campaigns": len(zero_conversion),
                    },
                ),
                {
                    "issues": issues,
                    "zero_conversion_campaigns": zero_conversion[:10],
                    "total_conversions": total_conversions,
                },
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _aggregate(self, rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        campaigns: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            campaign = row.get("campaign", {})
            metrics = row.get("metrics", {})
            data = campaigns.setdefault(campaign.get("id", "unknown"), {
                "name": campaign.get("name", "Unknown"),
                "conversions": 0.0,
                "all_conversions": 0.0,
                "cost": 0.0,
                "clicks": 0,
            })
            data["conversions"] += to_float(metrics.get("conversions"))
            data["all_conversions"] += to_float(metrics.get("allConversions"))
            data["cost"] += micros_to_amount(metrics.get("costMicros"))
            data["clicks"] += to_int(metrics.get("clicks"))
        return campaigns
