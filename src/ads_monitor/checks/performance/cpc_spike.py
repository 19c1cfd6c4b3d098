"""Check for sudden cost-per-click increases per campaign."""

import logging
from collections import defaultdict
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import (
    CPC_BASELINE_DAYS,
    CPC_MIN_DAYS,
    CPC_RECENT_DAYS,
    CPC_SPIKE_CRITICAL,
    CPC_SPIKE_INCREASE,
)
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_int

GAQL_QUERY = """
    SELECT
      campaign.id,
      campaign.name,
      segments.date,
      metrics.average_cpc,
      metrics.clicks,
      metrics.cost_micros
    FROM campaign
    WHERE campaign.status = 'ENABLED'
      AND segments.date DURING LAST_14_DAYS
      AND metrics.clicks > 0
    ORDER BY segments.date DESC
"""

INCREASE_PRECISION = 6


class CpcSpikeCheck(CheckBase):
    """Compare each campaign's recent average CPC with its baseline.

    Each day contributes one CPC. The plain mean of the last few days with
    data is compared with the mean of the days before them.
    """

    CHECK_ID = "cpc_spike"
    CHECK_NAME = "CPC Spike"
    DESCRIPTION = "Detects campaigns whose cost per click rose sharply"
    CATEGORY = CheckCategory.PERFORMANCE

    def __init__(
        self,
        increase_threshold: float = CPC_SPIKE_INCREASE,
        critical_threshold: float = CPC_SPIKE_CRITICAL,
        min_days: int = CPC_MIN_DAYS,
        recent_days: int = CPC_RECENT_DAYS,
        baseline_days: int = CPC_BASELINE_DAYS,
    ) -> None:
        super().__init__()
        self.increase_threshold = increase_threshold
        self.critical_threshold = critical_threshold
        self.min_days = min_days
        self.recent_days = recent_days
        self.baseline_days = baseline_days

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        increase_threshold = self.threshold(tenant, "cpc_spike_increase", self.increase_threshold)
        critical_threshold = self.threshold(tenant, "cpc_spike_critical", self.critical_threshold)

        try:
            response = await client.query(GAQL_QUERY)

            if not response.results:
                return self.ok_result({"message": "No campaign click data"})

            campaigns = self._group_by_campaign(response.results)
            spikes = []
            for campaign_id, data in campaigns.items():
                spike = self._detect_spike(campaign_id, data, increase_threshold)
                if spike:
                    spikes.append(spike)

            if not spikes:
                return self.ok_result({
                    "message": "No CPC spikes detected",
                    "campaigns_analysed": len(campaigns),
                })

            spikes.sort(key=lambda s: s["increase_percent"], reverse=True)
            count = len(spikes)
            max_increase = max(s["increase"] for s in spikes)
            top = spikes[0]

            logger.info(
                f"Found {count} campaigns with CPC spikes for {tenant.tenant_name} "
                f"(max +{top['increase_percent']}%)"
            )

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: CPC spike",
                    short_description=(
                        f"{count} campaign{'s' if count > 1 else ''} with a sharp CPC increase "
                        f"(up to +{top['increase_percent']}%)"
                    ),
                    impact=(
                        f"'{top['name']}' now pays €{top['recent_cpc']:.2f} per click "
                        f"instead of €{top['baseline_cpc']:.2f}. The same budget buys fewer clicks."
                    ),
                    suggested_actions=[
                        "Check auction insights for new or more aggressive competitors",
                        "Review recent bid strategy or target changes",
                        "Check whether quality scores dropped",
                        "Consider bid caps for affected campaigns",
                    ],
                    severity=Severity.CRITICAL if max_increase >= critical_threshold else Severity.HIGH,
                ),
                {"campaigns": spikes[:10], "total_count": count},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    def _group_by_campaign(self, rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Collect one CPC per campaign and day.

        A day's CPC is the reported average CPC, falling back to cost over
        clicks. Several rows for the same day are combined weighted by clicks.
        """
        campaigns: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            campaign = row.get("campaign", {})
            metrics = row.get("metrics", {})
            day = row.get("segments", {}).get("date")
            if not day:
                continue

            clicks = to_int(metrics.get("clicks"))
            cpc = micros_to_amount(metrics.get("averageCpc"))
            if cpc <= 0 and clicks > 0:
                cpc = micros_to_amount(metrics.get("costMicros")) / clicks
            if cpc <= 0:
                continue

            data = campaigns.setdefault(campaign.get("id", "unknown"), {
                "name": campaign.get("name", "Unknown"),
                "days": defaultdict(lambda: {"weighted_cpc": 0.0, "clicks": 0}),
            })
            weight = max(clicks, 1)
            data["days"][day]["weighted_cpc"] += cpc * weight
            data["days"][day]["clicks"] += weight

        for data in campaigns.values():
            data["daily_cpc"] = {
                day: values["weighted_cpc"] / values["clicks"]
                for day, values in data["days"].items()
            }
        return campaigns

    def _detect_spike(self, campaign_id: str, data: Dict[str, Any], threshold: float):
        days = sorted(data["daily_cpc"].items(), reverse=True)
        if len(days) < self.min_days:
            return None

        recent = [cpc for _, cpc in days[:self.recent_days]]
        baseline = [cpc for _, cpc in days[self.recent_days:self.recent_days + self.baseline_days]]

        recent_cpc = sum(recent) / len(recent)
        baseline_cpc = sum(baseline) / len(baseline) if baseline else 0.0
        if baseline_cpc <= 0:
            return None

        # Rounded so a CPC of 1.30 against 1.00 counts as exactly +30%
        increase = round((recent_cpc - baseline_cpc) / baseline_cpc, INCREASE_PRECISION)
        if increase < threshold:
            return None

        return {
            "campaign_id": campaign_id,
            "name": data["name"],
            "recent_cpc": round(recent_cpc, 2),
            "baseline_cpc": round(baseline_cpc, 2),
            "increase": increase,
            "increase_percent": round(increase * 100),
        }
