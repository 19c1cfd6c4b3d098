"""Check for enabled ad groups that have no ads."""

import logging

from ...client.google_ads import GoogleAdsClient
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase

AD_GROUPS_QUERY = """
    SELECT
      ad_group.id,
      ad_group.name,
      campaign.name
    FROM ad_group
    WHERE campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
"""

ADS_QUERY = """
    SELECT
      ad_group.id,
      ad_group_ad.status
    FROM ad_group_ad
    WHERE campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
"""

# Paused ads still count as present.
LIVE_AD_STATUSES = ("ENABLED", "PAUSED")


class AdGroupWithoutAdsCheck(CheckBase):
    """Detect enabled ad groups that cannot serve because they hold no ads."""

    CHECK_ID = "ad_group_without_ads"
    CHECK_NAME = "Ad Groups Without Ads"
    DESCRIPTION = "Detects enabled ad groups without any active ads"
    CATEGORY = CheckCategory.HYGIENE

    def __init__(self, critical_count: int = 5) -> None:
        super().__init__()
        self.critical_count = critical_count

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        try:
            groups_response = await client.query(AD_GROUPS_QUERY)
            ad_groups = {}
            for row in groups_response.results:
                ad_group = row.get("adGroup", {})
                if ad_group.get("id"):
                    ad_groups[ad_group["id"]] = {
                        "ad_group_id": ad_group["id"],
                        "ad_group_name": ad_group.get("name", "Unknown"),
                        "campaign_name": row.get("campaign", {}).get("name", "Unknown"),
                    }

            ads_response = await client.query(ADS_QUERY)
            with_ads = {
                row.get("adGroup", {}).get("id")
                for row in ads_response.results
                if row.get("adGroupAd", {}).get("status") in LIVE_AD_STATUSES
            }

            empty = [data for ad_group_id, data in ad_groups.items() if ad_group_id not in with_ads]

            if not empty:
                return self.ok_result({"message": "All ad groups have active ads"})

            count = len(empty)
            logger.info(f"Found {count} ad groups without ads for {tenant.tenant_name}")

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: ad groups without ads",
                    short_description=f"{count} ad group{'s' if count > 1 else ''} without active ads",
                    impact="These ad groups cannot serve and their keywords bring in nothing",
                    suggested_actions=[
                        "Add ads to these ad groups",
                        "Or pause the ad groups if they are no longer needed",
                        "Check whether ads were removed by accident",
                    ],
                    severity=Severity.CRITICAL if count > self.critical_count else Severity.HIGH,
                    details={"ad_group_count": count},
                ),
                {"ad_groups": empty[:15]},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise
