"""Check for campaigns that have spent their daily budget."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from dateutil import tz

from ...client.google_ads import GoogleAdsClient
from ...constants import BUDGET_CUTOFF_HOUR, BUDGET_DEPLETION_RATIO
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount

GAQL_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      campaign_budget.amount_micros,
      metrics.cost_micros
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND segments.date DURING TODAY
"""


class BudgetDepletedCheck(CheckBase):
    """Detect campaigns that ran out of budget today.

    Running out early in the day means the campaign is dark for the rest of
    it, so depletion before the cutoff hour (account local time) is critical.
    """

    CHECK_ID = "budget_depleted"
    CHECK_NAME = "Budget Depleted"
    DESCRIPTION = "Detects campaigns that have spent (almost) their entire daily budget"
    CATEGORY = CheckCategory.DELIVERY

    def __init__(
        self,
        depletion_ratio: float = BUDGET_DEPLETION_RATIO,
        cutoff_hour: int = BUDGET_CUTOFF_HOUR,
        critical_count: int = 2,
        clock: Optional[Callable[[Any], datetime]] = None,
    ) -> None:
        """Initialize budget depleted check.

        Args:
            depletion_ratio: Share of the daily budget that counts as depleted
            cutoff_hour: Local hour before which depletion is critical
            critical_count: Campaign count above which severity is critical
            clock: Returns the current time in the given tzinfo, for tests
        """
        super().__init__()
        self.depletion_ratio = depletion_ratio
        self.cutoff_hour = cutoff_hour
        self.critical_count = critical_count
        self.clock = clock or datetime.now

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        ratio = self.threshold(tenant, "budget_depletion_ratio", self.depletion_ratio)
        cutoff_hour = self.threshold(tenant, "budget_cutoff_hour", self.cutoff_hour)

        try:
            response = await client.query(GAQL_QUERY)
            depleted = self._find_depleted(response.results, ratio)

            if not depleted:
                return self.ok_result({"message": "No campaigns have depleted their budget"})

            count = len(depleted)
            local_now = self.clock(self._account_zone(tenant, logger))
            early = local_now.hour < cutoff_hour

            if early or count > self.critical_count:
                severity = Severity.CRITICAL
            else:
                severity = Severity.HIGH

            logger.info(
                f"Found {count} campaigns with depleted budget for {tenant.tenant_name} "
                f"at {local_now:%H:%M} local time"
            )

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: daily budget depleted",
                    short_description=(
                        f"{count} campaign{'s' if count > 1 else ''} spent their budget "
                        f"{'before ' + str(cutoff_hour) + ':00' if early else 'today'}"
                    ),
                    impact=(
                        "Campaigns stop serving for the rest of the day"
                        if early
                        else "Campaigns may miss traffic late in the day"
                    ),
                    suggested_actions=[
                        "Increase the daily budget of campaigns that perform well",
                        "Lower bids to stretch the budget over the day",
                        "Use ad scheduling to focus on the best hours",
                        "Check for unusual click activity",
                    ],
                    severity=severity,
                    details={
                        "depleted_campaigns": count,
                        "campaign_names": [c["name"] for c in depleted],
                        "local_time": local_now.strftime("%H:%M"),
                        "before_cutoff": early,
                    },
                ),
                {
                    "campaigns": depleted[:10],
                    "depletion_ratio": ratio,
                    "cutoff_hour": cutoff_hour,
                },
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    @staticmethod
    def _account_zone(tenant: TenantConfig, logger: logging.Logger):
        if not tenant.time_zone:
            return tz.UTC
        zone = tz.gettz(tenant.time_zone)
        if zone is None:
            logger.warning(f"Unknown time zone '{tenant.time_zone}' for {tenant.tenant_name}, using UTC")
            return tz.UTC
        return zone

    def _find_depleted(self, rows: List[Dict[str, Any]], ratio: float) -> List[Dict[str, Any]]:
        depleted = []
        for row in rows:
            budget = micros_to_amount(row.get("campaignBudget", {}).get("amountMicros"))
            cost = micros_to_amount(row.get("metrics", {}).get("costMicros"))
            if budget > 0 and cost >= budget * ratio:
                campaign = row.get("campaign", {})
                depleted.append({
                    "campaign_id": campaign.get("id", "unknown"),
                    "name": campaign.get("name", "Unknown"),
                    "budget": round(budget, 2),
                    "cost": round(cost, 2),
                    "spent_percent": round(cost / budget * 100),
                })
        return sorted(depleted, key=lambda c: c["spent_percent"], reverse=True)
