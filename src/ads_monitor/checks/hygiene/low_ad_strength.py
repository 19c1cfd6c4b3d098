"""Check for responsive search ads with weak ad strength."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import HIGH_SPEND_THRESHOLD, MIN_IMPRESSIONS
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_int

GAQL_QUERY = """
    SELECT
      ad_group_ad.ad.id,
      ad_group_ad.ad.name,
      ad_group_ad.ad.type,
      ad_group_ad.ad.responsive_search_ad.headlines,
      ad_group_ad.ad.responsive_search_ad.descriptions,
      ad_group_ad.ad_strength,
      ad_group_ad.status,
      ad_group.id,
      ad_group.name,
      campaign.id,
      campaign.name,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros
    FROM ad_group_ad
    WHERE ad_group_ad.ad.type = 'RESPONSIVE_SEARCH_AD'
      AND ad_group_ad.status = 'ENABLED'
      AND campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
      AND segments.date DURING LAST_30_DAYS
"""

WEAK_STRENGTHS = ("POOR", "AVERAGE", "UNSPECIFIED")
RECOMMENDED_HEADLINES = 8
MAX_HEADLINES = 15
RECOMMENDED_DESCRIPTIONS = 4


class LowAdStrengthCheck(CheckBase):
    """Detect active RSAs rated POOR or AVERAGE that still get impressions."""

    CHECK_ID = "low_ad_strength"
    CHECK_NAME = "Low Ad Strength"
    DESCRIPTION = "Detects responsive search ads with low ad strength"
    CATEGORY = CheckCategory.HYGIENE

    def __init__(
        self,
        min_impressions: int = MIN_IMPRESSIONS,
        high_spend: float = HIGH_SPEND_THRESHOLD,
        poor_count_threshold: int = 3,
    ) -> None:
        super().__init__()
        self.min_impressions = min_impressions
        self.high_spend = high_spend
        self.poor_count_threshold = poor_count_threshold

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        min_impressions = self.threshold(tenant, "min_impressions", self.min_impressions)

        try:
            response = await client.query(GAQL_QUERY)

            if not response.results:
                return self.ok_result({"message": "No active responsive search ads found"})

            ads = self._aggregate(response.results)
            weak = [
                {**data, "ad_id": ad_id, "recommendations": self._recommendations(data)}
                for ad_id, data in ads.items()
                if data["ad_strength"] in WEAK_STRENGTHS and data["impressions"] >= min_impressions
            ]
            weak.sort(key=lambda ad: ad["cost"], reverse=True)

            if not weak:
                return self.ok_result({
                    "message": "All active responsive search ads have good ad strength",
                    "total_ads": len(ads),
                    "excellent_count": sum(1 for ad in ads.values() if ad["ad_strength"] == "EXCELLENT"),
                })

            count = len(weak)
            poor_count = sum(1 for ad in weak if ad["ad_strength"] == "POOR")
            total_spend = sum(ad["cost"] for ad in weak)

            logger.info(
                f"Found {count} RSAs with low ad strength for {tenant.tenant_name} ({poor_count} poor)"
            )

            high = poor_count > self.poor_count_threshold or total_spend > self.high_spend
            strength_label = "POOR/AVERAGE" if poor_count else "AVERAGE"

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: responsive search ads with low strength",
                    short_description=f"{count} RSA{'s' if count > 1 else ''} with {strength_label} strength",
                    impact=(
                        f"€{total_spend:.2f} spent on ads with low strength (30 days). "
                        f"Stronger ads win more impressions at lower cost."
                    ),
                    suggested_actions=[
                        "Add more unique headlines (8 to 10 recommended)",
                        "Add more descriptions (3 to 4 recommended)",
                        "Vary headlines so they are not too similar",
                        "Use keywords in headlines for relevance",
                        "Avoid pinning too many assets",
                    ],
                    severity=Severity.HIGH if high else Severity.MEDIUM,
                    details={
                        "low_strength_count": count,
                        "poor_count": poor_count,
                        "average_count": count - poor_count,
                        "total_spend": round(total_spend, 2),
                    },
                ),
                {
                    "ads": weak[:15],
                    "total_count": count,
                    "strength_distribution": {"poor": poor_count, "average": count - poor_count},
                },
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _aggregate(self, rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        ads: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            ad_group_ad = row.get("adGroupAd", {})
            ad = ad_group_ad.get("ad", {})
            rsa = ad.get("responsiveSearchAd") or {}
            metrics = row.get("metrics", {})
            ad_id = ad.get("id", "unknown")

            data = ads.setdefault(ad_id, {
                "ad_name": ad.get("name") or f"Ad {ad_id}",
                "ad_strength": ad_group_ad.get("adStrength", "UNKNOWN"),
                "ad_group_name": row.get("adGroup", {}).get("name", "Unknown ad group"),
                "campaign_name": row.get("campaign", {}).get("name", "Unknown campaign"),
                "headline_count": len(rsa.get("headlines", [])),
                "description_count": len(rsa.get("descriptions", [])),
                "impressions": 0,
                "clicks": 0,
                "cost": 0.0,
            })
            data["impressions"] += to_int(metrics.get("impressions"))
            data["clicks"] += to_int(metrics.get("clicks"))
            data["cost"] += micros_to_amount(metrics.get("costMicros"))
        return ads

    @staticmethod
    def _recommendations(data: Dict[str, Any]) -> List[str]:
        recs = []
        headlines = data["headline_count"]
        descriptions = data["description_count"]
        if headlines < RECOMMENDED_HEADLINES:
            recs.append(f"Add {RECOMMENDED_HEADLINES - headlines} headlines (currently {headlines})")
        if headlines < MAX_HEADLINES:
            recs.append(f"Use up to {MAX_HEADLINES} headlines for optimal rotation")
        if descriptions < RECOMMENDED_DESCRIPTIONS:
            recs.append(f"Add {RECOMMENDED_DESCRIPTIONS - descriptions} descriptions (currently {descriptions})")
        return recs
