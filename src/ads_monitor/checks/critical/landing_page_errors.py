"""Check for policy findings on landing pages."""

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
      ad_group_ad.ad.final_urls,
      ad_group_ad.policy_summary.approval_status,
      ad_group_ad.policy_summary.policy_topic_entries,
      ad_group.name,
      campaign.name,
      metrics.impressions,
      metrics.clicks
    FROM ad_group_ad
    WHERE campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
      AND ad_group_ad.status = 'ENABLED'
      AND segments.date DURING LAST_7_DAYS
"""

LANDING_PAGE_TOPIC_MARKERS = ("destination", "landing", "url", "site", "malware", "phishing")


def is_landing_page_topic(topic: str) -> bool:
    """Whether a policy topic concerns the ad's destination."""
    topic = (topic or "").lower()
    return any(marker in topic for marker in LANDING_PAGE_TOPIC_MARKERS)


class LandingPageErrorsCheck(CheckBase):
    """Detect ads whose destination was flagged by policy review."""

    CHECK_ID = "landing_page_errors"
    CHECK_NAME = "Landing Page Errors"
    DESCRIPTION = "Detects ads with destination, malware or unreachable landing page policy findings"
    CATEGORY = CheckCategory.CRITICAL

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        try:
            response = await client.query(GAQL_QUERY)
            issues = self._find_issues(response.results)

            if not issues:
                return self.ok_result({"message": "No landing page problems detected"})

            count = len(issues)
            unique_urls = len({issue["url"] for issue in issues})

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: landing page problems",
                    short_description=(
                        f"{count} ad{'s' if count > 1 else ''} with landing page issues "
                        f"({unique_urls} unique URLs)"
                    ),
                    impact="Ads cannot serve or have lower quality",
                    suggested_actions=[
                        "Check that the landing pages are reachable",
                        "Fix any 404 errors",
                        "Make sure pages load quickly",
                        "Verify that the content complies with Google policies",
                    ],
                    severity=Severity.CRITICAL,
                    details={"ad_count": count, "unique_urls": unique_urls},
                ),
                {"issues": issues[:15]},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _find_issues(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        issues = []
        seen = set()
        for row in rows:
            ad_group_ad = row.get("adGroupAd", {})
            ad = ad_group_ad.get("ad", {})
            entries = ad_group_ad.get("policySummary", {}).get("policyTopicEntries", [])
            topics = [e.get("topic", "") for e in entries if is_landing_page_topic(e.get("topic", ""))]
            if not topics:
                continue

            ad_id = ad.get("id", "unknown")
            if ad_id in seen:
                continue
            seen.add(ad_id)

            final_urls = ad.get("finalUrls") or []
            issues.append({
                "ad_id": ad_id,
                "url": final_urls[0] if final_urls else "Unknown URL",
                "ad_group_name": row.get("adGroup", {}).get("name", "Unknown"),
                "campaign_name": row.get("campaign", {}).get("name", "Unknown"),
                "issue": ", ".join(topics),
            })
        return issues
