"""Check for the same keyword in several ad groups."""

import logging
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase

GAQL_QUERY = """
    SELECT
      ad_group.id,
      ad_group.name,
      campaign.id,
      campaign.name,
      ad_group_criterion.keyword.text,
      ad_group_criterion.keyword.match_type
    FROM keyword_view
    WHERE ad_group_criterion.status = 'ENABLED'
      AND campaign.status = 'ENABLED'
      AND ad_group.status = 'ENABLED'
"""


class KeywordConflictsCheck(CheckBase):
    """Detect keywords that compete with themselves across ad groups."""

    CHECK_ID = "keyword_conflicts"
    CHECK_NAME = "Keyword Conflicts"
    DESCRIPTION = "Detects the same keyword in multiple ad groups (self-competition)"
    CATEGORY = CheckCategory.HYGIENE

    def __init__(self, critical_count: int = 20) -> None:
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
            conflicts = self._find_conflicts(response.results)

            if not conflicts:
                return self.ok_result({"message": "No keyword conflicts found"})

            count = len(conflicts)
            logger.info(f"Found {count} conflicting keywords for {tenant.tenant_name}")

            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: keyword conflicts",
                    short_description=f"{count} keyword{'s' if count > 1 else ''} in multiple ad groups",
                    impact="You are bidding against yourself, which raises CPCs and wastes budget",
                    suggested_actions=[
                        "Consolidate duplicate keywords into one ad group",
                        "Use negative keywords to prevent overlap",
                        "Restructure campaigns for a cleaner organisation",
                    ],
                    severity=Severity.CRITICAL if count > self.critical_count else Severity.HIGH,
                    details={
                        "conflict_count": count,
                        "worst_offender": conflicts[0]["keyword"],
                    },
                ),
                {"conflicts": conflicts[:15]},
            )

        except Exception as e:
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

    @staticmethod
    def _find_conflicts(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        groups: Dict[str, Dict[str, Dict[str, str]]] = {}
        for row in rows:
            keyword = row.get("adGroupCriterion", {}).get("keyword", {})
            text = (keyword.get("text") or "").lower().strip()
            if not text:
                continue

            key = f"{text}|{keyword.get('matchType', 'UNKNOWN')}"
            ad_group = row.get("adGroup", {})
            groups.setdefault(key, {})[ad_group.get("id", "unknown")] = {
                "ad_group_id": ad_group.get("id", "unknown"),
                "ad_group_name": ad_group.get("name", "Unknown"),
                "campaign_name": row.get("campaign", {}).get("name", "Unknown"),
            }

        conflicts = []
        for key, locations in groups.items():
            if len(locations) < 2:
                continue
            text, match_type = key.rsplit("|", 1)
            conflicts.append({
                "keyword": text,
                "match_type": match_type,
                "count": len(locations),
                "locations": list(locations.values())[:5],
            })
        conflicts.sort(key=lambda c: c["count"], reverse=True)
        return conflicts
