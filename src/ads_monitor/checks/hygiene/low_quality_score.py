"""Check for keywords with a low quality score."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import HIGH_SPEND_THRESHOLD, MIN_IMPRESSIONS, QUALITY_SCORE_FLOOR
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_int

GAQL_QUERY = """
    SELECT
      ad_group_criterion.criterion_id,
      ad_group_criterion.keyword.text,
      ad_group_criterion.keyword.match_type,
      ad_group_criterion.quality_info.quality_score,
      ad_group_criterion.quality_info.creative_landing_page_quality,
      ad_group_criterion.quality_info.search_predicted_ctr,
      ad_group_criterion.quality_info.post_click_quality_score,
      ad_group.id,
      ad_group.name,
      campaign.id,
      campaign.name,
      metrics.impressions,
      metrics.clicks,
      metrics.cost_micros
    FROM keyword_view
    WHERE ad_group_criterion.status = 'ENABLED'
      AND campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
      AND ad_group_criterion.quality_info.quality_score IS NOT NULL
      AND ad_group_criterion.quality_info.quality_score < {floor}
      AND segments.date DURING LAST_30_DAYS
"""

BELOW_AVERAGE = "BELOW_AVERAGE"


class LowQualityScoreCheck(CheckBase):
    """Detect keywords with a low quality score and meaningful traffic."""

    CHECK_ID = "low_quality_score"
    CHECK_NAME = "Low Quality Score"
    DESCRIPTION = "Detects keywords with a low quality score that waste budget"
    CATEGORY = CheckCategory.HYGIENE

    def __init__(
        self,
        quality_score_floor: int = QUALITY_SCORE_FLOOR,
        min_impressions: int = MIN_IMPRESSIONS,
        high_spend: float = HIGH_SPEND_THRESHOLD,
    ) -> None:
        super().__init__()
        self.quality_score_floor = quality_score_floor
        self.min_impressions = min_impressions
        self.high_spend = high_spend

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        floor = self.threshold(tenant, "quality_score_floor", self.quality_score_floor)
        min_impressions = self.threshold(tenant, "min_impressions", self.min_impressions)

        try:
            response = await client.query(GAQL_QUERY.format(floor=int(floor)))

            if not response.results:
                return self.ok_result({"message": "All keywords have acceptable quality scores"})

            keywords = self._parse_keywords(response.results)
            significant = [
                kw for kw in keywords
                if kw["impressions"] >= min_impressions and kw["quality_score"] < floor
            ]

            if not significant:
                return self.ok_result({
                    "message": "No low quality score keywords with significant traffic",
                    "total_low_qs": len(keywords),
                })

            count = len(significant)
            total_spend = sum(kw["cost"] for kw in significant)
            avg_qs = sum(kw["quality_score"] for kw in significant) / count
            breakdown = {
                "landing_page": sum(1 for kw in significant if kw["landing_page_quality"] == BELOW_AVERAGE),
                "expected_ctr": sum(1 for kw in significant if kw["expected_ctr"] == BELOW_AVERAGE),
                "ad_relevance": sum(1 for kw in significant if kw["ad_relevance"] == BELOW_AVERAGE),
            }

            logger.info(
                f"Found {count} low quality score keywords for {tenant.tenant_name} "
                f"(avg QS {avg_qs:.1f}, €{total_spend:.2f} spend)"
            )

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: keywords with low quality score",
                    short_description=f"{count} keyword{'s' if count > 1 else ''} with QS < {int(floor)}",
                    impact=(
                        f"Higher CPCs and lower positions because of low quality scores. "
                        f"€{total_spend:.2f} spent on low QS keywords (30 days)."
                    ),
                    suggested_actions=self._suggested_actions(breakdown),
                    severity=Severity.HIGH if count > 10 or total_spend > self.high_spend else Severity.MEDIUM,
                    details={
                        "low_qs_count": count,
                        "avg_quality_score": round(avg_qs, 1),
                        "total_spend": round(total_spend, 2),
                        "issue_breakdown": breakdown,
                    },
                ),
                {"keywords": significant[:15], "total_count": count, "issue_breakdown": breakdown},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _parse_keywords(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        keywords = []
        for row in rows:
            criterion = row.get("adGroupCriterion", {})
            keyword = criterion.get("keyword", {})
            quality = criterion.get("qualityInfo", {})
            metrics = row.get("metrics", {})
            keywords.append({
                "keyword_id": criterion.get("criterionId", "unknown"),
                "keyword": keyword.get("text", "Unknown keyword"),
                "match_type": keyword.get("matchType", "UNKNOWN"),
                "quality_score": to_int(quality.get("qualityScore")),
                "landing_page_quality": quality.get("creativeLandingPageQuality", "UNKNOWN"),
                "expected_ctr": quality.get("searchPredictedCtr", "UNKNOWN"),
                "ad_relevance": quality.get("postClickQualityScore", "UNKNOWN"),
                "ad_group_name": row.get("adGroup", {}).get("name", "Unknown ad group"),
                "campaign_name": row.get("campaign", {}).get("name", "Unknown campaign"),
                "impressions": to_int(metrics.get("impressions")),
                "clicks": to_int(metrics.get("clicks")),
                "cost": round(micros_to_amount(metrics.get("costMicros")), 2),
            })
        keywords.sort(key=lambda kw: kw["cost"], reverse=True)
        return keywords

    @staticmethod
    def _suggested_actions(breakdown: Dict[str, int]) -> List[str]:
        actions = []
        if breakdown["landing_page"]:
            actions.append(
                f"Improve {breakdown['landing_page']} landing pages (load speed, relevance, mobile experience)"
            )
        if breakdown["expected_ctr"]:
            actions.append(
                f"Rewrite ad copy for {breakdown['expected_ctr']} keywords with below average expected CTR"
            )
        if breakdown["ad_relevance"]:
            actions.append(
                f"Improve ad relevance for {breakdown['ad_relevance']} keywords by matching search intent"
            )
        actions.extend([
            "Consider pausing poorly performing keywords",
            "Create tighter ad groups for better relevance",
            "Test new ad variants with a stronger call to action",
        ])
        return actions
