"""Check for enabled campaigns that did not serve."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from dateutil.parser import isoparse

from ...client.google_ads import GoogleAdsClient
from ...constants import NO_DELIVERY_HOURS
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, to_int

GAQL_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      campaign.status,
      campaign.start_date,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND segments.date DURING YESTERDAY
"""


class NoDeliveryCheck(CheckBase):
    """Detect enabled campaigns without impressions yesterday."""

    CHECK_ID = "no_delivery"
    CHECK_NAME = "No Delivery"
    DESCRIPTION = "Detects enabled campaigns that received no impressions"
    CATEGORY = CheckCategory.DELIVERY

    def __init__(
        self,
        no_delivery_hours: int = NO_DELIVERY_HOURS,
        critical_count: int = 3,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize no delivery check.

        Args:
            no_delivery_hours: Minimum age of a campaign before it is flagged
            critical_count: Campaign count above which severity is critical
            clock: Returns the current UTC time, for tests
        """
        super().__init__()
        self.no_delivery_hours = no_delivery_hours
        self.critical_count = critical_count
        self.clock = clock or datetime.utcnow

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        threshold_hours = self.threshold(tenant, "no_delivery_hours", self.no_delivery_hours)

        try:
            response = await client.query(GAQL_QUERY)

            if not response.results:
                logger.debug("No enabled campaigns found")
                return self.ok_result({"message": "No enabled campaigns found"})

            campaigns = self._find_campaigns(response.results, threshold_hours)

            if not campaigns:
                logger.debug("All enabled campaigns have delivery")
                return self.ok_result({
                    "message": "All enabled campaigns have impressions",
                    "total_campaigns": len(response.results),
                })

            count = len(campaigns)
            names = [c["name"] for c in campaigns]
            logger.info(f"Found {count} campaigns without delivery for {tenant.tenant_name}")

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: campaigns without impressions",
                    short_description=f"{count} campaign{'s' if count > 1 else ''} enabled but not delivering",
                    impact="Budget is not being spent and campaigns are not reaching an audience",
                    suggested_actions=[
                        "Check the campaign settings",
                        "Check whether the budget is sufficient",
                        "Check that bids are competitive enough",
                        "Check targeting and ad group status",
                        "Verify that no ad scheduling restrictions apply",
                    ],
                    severity=Severity.CRITICAL if count > self.critical_count else Severity.HIGH,
                    details={"no_delivery_campaigns": count, "campaign_names": names},
                ),
                {
                    "campaigns": campaigns[:10],
                    "total_no_delivery": count,
                    "threshold_hours": threshold_hours,
                },
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _find_campaigns(self, rows: List[Dict[str, Any]], threshold_hours: int) -> List[Dict[str, Any]]:
        now = self.clock()
        campaigns = []

        for row in rows:
            campaign = row.get("campaign", {})
            impressions = to_int(row.get("metrics", {}).get("impressions"))
            if impressions > 0:
                continue

            start_date = campaign.get("startDate")
            hours_old = None
            if start_date:
                started = isoparse(start_date).replace(tzinfo=None)
                hours_old = (now - started).total_seconds() / 3600
                if hours_old < threshold_hours:
                    continue

            campaigns.append({
                "campaign_id": campaign.get("id", "unknown"),
                "name": campaign.get("name", "Unknown"),
                "status": campaign.get("status", "UNKNOWN"),
                "start_date": start_date,
                "impressions": impressions,
                "hours_old": round(hours_old) if hours_old is not None else None,
            })

        return campaigns
