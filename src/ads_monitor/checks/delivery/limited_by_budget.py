"""Check for search campaigns losing impression share to budget."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import LOST_IMPRESSION_SHARE_THRESHOLD, RECOMMENDED_BUDGET_RATIO
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_float, to_int

GAQL_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      campaign.serving_status,
      campaign_budget.id,
      campaign_budget.name,
      campaign_budget.amount_micros,
      campaign_budget.recommended_budget_amount_micros,
      campaign_budget.recommended_budget_estimated_change_weekly_clicks,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros,
      metrics.search_impression_share,
      metrics.search_budget_lost_impression_share
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND campaign.advertising_channel_type = 'SEARCH'
      AND segments.date DURING LAST_7_DAYS
"""


class LimitedByBudgetCheck(CheckBase):
    """Detect campaigns that miss impressions because their budget is too low."""

    CHECK_ID = "limited_by_budget"
    CHECK_NAME = "Limited by Budget"
    DESCRIPTION = "Detects search campaigns losing impression share because of budget"
    CATEGORY = CheckCategory.DELIVERY

    def __init__(
        self,
        lost_impression_share: float = LOST_IMPRESSION_SHARE_THRESHOLD,
        recommended_budget_ratio: float = RECOMMENDED_BUDGET_RATIO,
    ) -> None:
        super().__init__()
        self.lost_impression_share = lost_impression_share
        self.recommended_budget_ratio = recommended_budget_ratio

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        lost_share = self.threshold(tenant, "lost_impression_share", self.lost_impression_share)

        try:
            response = await client.query(GAQL_QUERY)

            if not response.results:
                logger.debug("No search campaigns found")
                return self.ok_result({"message": "No search campaigns found"})

            campaigns = self._aggregate(response.results)
            limited = [
                self._summarize(campaign_id, data)
                for campaign_id, data in campaigns.items()
                if self._is_limited(data, lost_share)
            ]
            limited.sort(key=lambda c: c["budget_lost_is_percent"], reverse=True)

            if not limited:
                return self.ok_result({
                    "message": "No campaigns limited by budget",
                    "total_campaigns": len(campaigns),
                })

            count = len(limited)
            extra_clicks = sum(c["estimated_extra_clicks"] for c in limited)
            avg_lost = sum(c["budget_lost_is_percent"] for c in limited) / count

            logger.info(
                f"Found {count} campaigns limited by budget for {tenant.tenant_name} "
                f"(avg {avg_lost:.0f}% impression share lost)"
            )

            if extra_clicks > 0:
                impact = (
                    f"An estimated ~{extra_clicks} extra clicks/week are possible with a higher budget. "
                    f"On average {avg_lost:.0f}% of impressions are lost to budget."
                )
            else:
                impact = f"On average {avg_lost:.0f}% of impressions are lost to budget limits"

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: campaigns limited by budget",
                    short_description=f"{count} campaign{'s' if count > 1 else ''} missing opportunities because of budget",
                    impact=impact,
                    suggested_actions=[
                        "Increase budgets for well performing campaigns",
                        "Shift budget from poor to well performing campaigns",
                        "Optimise bids for more efficient budget use",
                        "Refine targeting to reduce waste",
                        "Consider ad scheduling to focus budget on peak hours",
                    ],
                    severity=Severity.HIGH if avg_lost > 40 or count > 3 else Severity.MEDIUM,
                    details={
                        "limited_campaigns_count": count,
                        "avg_budget_lost_is": round(avg_lost, 1),
                        "total_estimated_extra_clicks": extra_clicks,
                    },
                ),
                {"campaigns": limited[:10], "total_count": count},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _aggregate(self, rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Sum daily rows per campaign, keeping the worst budget loss."""
        campaigns: Dict[str, Dict[str, Any]] = {}

        for row in rows:
            campaign = row.get("campaign", {})
            budget = row.get("campaignBudget", {})
            metrics = row.get("metrics", {})
            campaign_id = campaign.get("id", "unknown")

            data = campaigns.setdefault(campaign_id, {
                "name": campaign.get("name", "Unknown"),
                "serving_status": campaign.get("servingStatus", "UNKNOWN"),
                "budget": micros_to_amount(budget.get("amountMicros")),
                "recommended_budget": micros_to_amount(budget.get("recommendedBudgetAmountMicros")),
                "estimated_extra_clicks": to_int(budget.get("recommendedBudgetEstimatedChangeWeeklyClicks")),
                "impressions": 0,
                "clicks": 0,
                "cost": 0.0,
                "impression_share": 0.0,
                "budget_lost_is": 0.0,
            })

            data["impressions"] += to_int(metrics.get("impressions"))
            data["clicks"] += to_int(metrics.get("clicks"))
            data["cost"] += micros_to_amount(metrics.get("costMicros"))

            lost = to_float(metrics.get("searchBudgetLostImpressionShare"))
            if lost > data["budget_lost_is"]:
                data["budget_lost_is"] = lost
                data["impression_share"] = to_float(metrics.get("searchImpressionShare"))

        return campaigns

    def _is_limited(self, data: Dict[str, Any], lost_share: float) -> bool:
        return (
            data["budget_lost_is"] > lost_share
            or data["serving_status"] == "ELIGIBLE_LIMITED"
            or (
                data["recommended_budget"] > 0
                and data["recommended_budget"] > data["budget"] * self.recommended_budget_ratio
            )
        )

    def _summarize(self, campaign_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        budget_increase = 0
        if data["recommended_budget"] > 0 and data["budget"] > 0:
            budget_increase = round((data["recommended_budget"] - data["budget"]) / data["budget"] * 100)

        return {
            "campaign_id": campaign_id,
            "name": data["name"],
            "serving_status": data["serving_status"],
            "budget": round(data["budget"], 2),
            "recommended_budget": round(data["recommended_budget"], 2),
            "estimated_extra_clicks": data["estimated_extra_clicks"],
            "cost": round(data["cost"], 2),
            "budget_lost_is_percent": round(data["budget_lost_is"] * 100),
            "impression_share_percent": round(data["impression_share"] * 100),
            "budget_increase_percent": budget_increase,
        }
