"""Check for ads rejected by Google's policy review."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase

GAQL_QUERY = """
    SELECT
      ad_group_ad.ad.id,
      ad_group_ad.ad.name,
      ad_group_ad.policy_summary.approval_status,
      ad_group_ad.policy_summary.policy_topic_entries,
      ad_group.id,
      ad_group.name,
      campaign.id,
      campaign.name
    FROM ad_group_ad
    WHERE ad_group_ad.policy_summary.approval_status != 'APPROVED'
      AND ad_group_ad.policy_summary.approval_status != 'APPROVED_LIMITED'
      AND ad_group_ad.status != 'REMOVED'
      AND ad_group.status != 'REMOVED'
      AND campaign.status != 'REMOVED'
"""


class DisapprovedAdsCheck(CheckBase):
    """Detect ads that are not serving because they were disapproved."""

    CHECK_ID = "disapproved_ads"
    CHECK_NAME = "Disapproved Ads"
    DESCRIPTION = "Detects ads that were disapproved and no longer serve"
    CATEGORY = CheckCategory.CRITICAL

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
            response = await client.query(GAQL_QUERY)

            if not response.results:
                logger.debug("No disapproved ads found")
                return self.ok_result({"message": "All ads are approved"})

            disapproved_ads = self._process_rows(response.results)
            count = len(disapproved_ads)

            policy_topics = sorted({
                topic for ad in disapproved_ads for topic in ad["policy_topics"]
            })

            logger.info(f"Found {count} disapproved ads for {tenant.tenant_name}")

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: ads disapproved",
                    short_description=f"{count} ad{'s' if count > 1 else ''} disapproved",
                    impact=(
                        "Several ads are not serving, campaign effectiveness is significantly reduced"
                        if count > 3
                        else "Ads are currently not serving"
                    ),
                    suggested_actions=[
                        "Review the disapproved ads in Google Ads",
                        "Check which policy topics were violated",
                        "Adjust the ad text or images",
                        "Resubmit the ads for review",
                    ],
                    severity=Severity.CRITICAL if count > self.critical_count else Severity.HIGH,
                    details={
                        "disapproved_count": count,
                        "policy_topics": policy_topics,
                    },
                ),
                {
                    "disapproved_ads": disapproved_ads[:10],
                    "total_count": count,
                    "policy_topics": policy_topics,
                },
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _process_rows(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ads = []
        for row in rows:
            ad_group_ad = row.get("adGroupAd", {})
            policy_summary = ad_group_ad.get("policySummary", {})
            topics = [
                entry.get("topic")
                for entry in policy_summary.get("policyTopicEntries", [])
                if entry.get("topic")
            ]
            ads.append({
                "ad_id": ad_group_ad.get("ad", {}).get("id", "unknown"),
                "ad_name": ad_group_ad.get("ad", {}).get("name") or "Unnamed Ad",
                "ad_group_name": row.get("adGroup", {}).get("name", "Unknown Ad Group"),
                "campaign_name": row.get("campaign", {}).get("name", "Unknown Campaign"),
                "approval_status": policy_summary.get("approvalStatus", "UNKNOWN"),
                "policy_topics": topics,
            })
        return ads
