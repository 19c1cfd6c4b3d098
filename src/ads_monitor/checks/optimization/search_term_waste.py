"""Check for search terms that spend without converting."""

import logging
from collections import Counter
from typing import Any, Dict, List

from ...client.google_ads import GoogleAdsClient
from ...constants import (
    MAX_NEGATIVE_SUGGESTIONS,
    SEARCH_TERM_CRITICAL_TOTAL,
    SEARCH_TERM_EXACT_MATCH_COST,
    SEARCH_TERM_MIN_CLICKS,
    SEARCH_TERM_MIN_SPEND,
    SEARCH_TERM_TOP_N,
    SEARCH_TERM_WARNING_TOTAL,
)
from ...exceptions import GoogleAdsClientError
from ...models.base import CheckCategory, Severity
from ...models.checks import AlertData, CheckResult
from ...models.tenants import TenantConfig
from ..base import CheckBase, micros_to_amount, to_float, to_int

GAQL_QUERY = """
    SELECT
      search_term_view.search_term,
      campaign.id,
      campaign.name,
      ad_group.id,
      ad_group.name,
      metrics.clicks,
      metrics.cost_micros,
      metrics.conversions,
      metrics.impressions
    FROM search_term_view
    WHERE segments.date DURING LAST_30_DAYS
      AND campaign.status = 'ENABLED'
      AND metrics.clicks >= {min_clicks}
      AND metrics.cost_micros >= {min_cost_micros}
      AND metrics.conversions = 0
    ORDER BY metrics.cost_micros DESC
    LIMIT 100
"""

# Modifiers that rarely signal buying intent (Dutch and English).
IRRELEVANT_MODIFIERS = (
    "gratis", "free", "goedkoop", "cheap", "kopen", "download",
    "pdf", "template", "voorbeeld", "example", "diy", "zelf",
    "vacature", "job", "salaris", "salary", "cursus", "course",
    "wiki", "wikipedia", "review", "ervaringen", "forum",
)


def suggest_negative_keywords(
    terms: List[Dict[str, Any]],
    exact_match_cost: float = SEARCH_TERM_EXACT_MATCH_COST,
    limit: int = MAX_NEGATIVE_SUGGESTIONS,
) -> List[str]:
    """Build negative keyword suggestions from wasteful search terms.

    Irrelevant modifiers and words shared by several terms become phrase
    match negatives ("word"); expensive single terms become exact match
    negatives ([term]).
    """
    word_counts: Counter = Counter()
    for term in terms:
        for word in term["search_term"].lower().split():
            if len(word) > 2:
                word_counts[word] += 1

    suggestions: List[str] = []
    for modifier in IRRELEVANT_MODIFIERS:
        if word_counts[modifier]:
            suggestions.append(f'"{modifier}"')

    expensive = [t for t in terms if t["cost"] >= exact_match_cost][:5]
    for term in expensive:
        suggestion = f"[{term['search_term']}]"
        if suggestion not in suggestions:
            suggestions.append(suggestion)

    frequent = [word for word, count in word_counts.most_common() if count >= 2][:10]
    for word in frequent:
        if word in IRRELEVANT_MODIFIERS:
            continue
        if any(word in s for s in suggestions):
            continue
        suggestions.append(f'"{word}"')

    return suggestions[:limit]


def _is_unavailable(error: Exception) -> bool:
    text = str(error)
    if isinstance(error, GoogleAdsClientError) and error.details:
        text = f"{text} {error.details}"
    return "PERMISSION_DENIED" in text or "search_term_view" in text


class SearchTermWasteCheck(CheckBase):
    """Detect search terms with clicks and spend but no conversions.

    Accounts without search term access (e.g. Performance Max only) are
    reported as ok.
    """

    CHECK_ID = "search_term_waste"
    CHECK_NAME = "Search Term Waste"
    DESCRIPTION = "Detects search terms that cost money without converting, with negative keyword suggestions"
    CATEGORY = CheckCategory.OPTIMIZATION

    def __init__(
        self,
        min_spend: float = SEARCH_TERM_MIN_SPEND,
        min_clicks: int = SEARCH_TERM_MIN_CLICKS,
        top_n: int = SEARCH_TERM_TOP_N,
        warning_total: float = SEARCH_TERM_WARNING_TOTAL,
        critical_total: float = SEARCH_TERM_CRITICAL_TOTAL,
    ) -> None:
        super().__init__()
        self.min_spend = min_spend
        self.min_clicks = min_clicks
        self.top_n = top_n
        self.warning_total = warning_total
        self.critical_total = critical_total

    async def run(
        self,
        client: GoogleAdsClient,
        tenant: TenantConfig,
        logger: logging.Logger,
    ) -> CheckResult:
        logger.debug(f"Running {self.id} check for {tenant.tenant_name}")

        min_spend = self.threshold(tenant, "search_term_min_spend", self.min_spend)
        min_clicks = self.threshold(tenant, "search_term_min_clicks", self.min_clicks)

        try:
            response = await client.query(GAQL_QUERY.format(
                min_clicks=int(min_clicks),
                min_cost_micros=int(min_spend * 1_000_000),
            ))
        except Exception as e:
            if _is_unavailable(e):
                logger.debug(f"Search term view not accessible for {tenant.tenant_name}: {e}")
                return self.ok_result({
                    "message": "Search term report not available",
                    "note": "This can be caused by the account type (e.g. only Performance Max) or permissions",
                })
            logger.error(f"Error running {self.id} check for {tenant.tenant_name}: {e}")
            raise

        terms = [
            term for term in (self._parse(row) for row in response.results)
            if term["search_term"]
            and term["cost"] >= min_spend
            and term["clicks"] >= min_clicks
            and term["conversions"] == 0
        ]
        terms.sort(key=lambda t: t["cost"], reverse=True)
        terms = terms[:self.top_n]

        if not terms:
            return self.ok_result({"message": "No search terms with significant waste"})

        total_waste = sum(t["cost"] for t in terms)
        total_clicks = sum(t["clicks"] for t in terms)
        negatives = suggest_negative_keywords(terms)
        count = len(terms)

        top_terms = "\n  • ".join(
            f'"{t["search_term"]}" (€{t["cost"]:.0f}, {t["clicks"]} clicks)' for t in terms[:5]
        )
        details = {
            "wasted_terms": [
                {
                    "search_term": t["search_term"],
                    "cost": t["cost"],
                    "clicks": t["clicks"],
                    "campaign_name": t["campaign_name"],
                }
                for t in terms
            ],
            "total_waste": round(total_waste, 2),
            "total_clicks": total_clicks,
            "suggested_negatives": negatives,
            "period": "last_30_days",
        }
        summary = f"€{total_waste:.0f} spent on {count} search terms without conversions (30 days)"

        if total_waste >= self.critical_total:
            logger.warning(f"Critical search term waste for {tenant.tenant_name}: €{total_waste:.0f}")
            return self.error_result(
                count,
                AlertData(
                    title="Google Ads: significant search term waste",
                    short_description=summary,
                    impact=(
                        f"€{total_waste:.0f} went to {count} search terms that produced {total_clicks} clicks "
                        f"and not a single conversion. Negative keywords can prevent this.\n\n"
                        f"Top wasters:\n  • {top_terms}"
                    ),
                    suggested_actions=[
                        f"Add these negative keywords: {', '.join(negatives[:5])}",
                        "Review the full search terms report in Google Ads",
                        "Analyse why these terms do not convert (intent mismatch?)",
                        "Consider phrase or exact match for important keywords",
                        "Set up a weekly search term review",
                    ],
                    severity=Severity.CRITICAL,
                ),
                details,
            )

        if total_waste >= self.warning_total:
            logger.info(f"Search term waste warning for {tenant.tenant_name}: €{total_waste:.0f}")
            return self.warning_result(
                count,
                AlertData(
                    title="Google Ads: search term waste detected",
                    short_description=summary,
                    impact=(
                        f"€{total_waste:.0f} was spent on search terms that do not convert. "
                        f"A good moment to clean up the search terms.\n\n"
                        f"Examples:\n  • {top_terms}"
                    ),
                    suggested_actions=[
                        f"Consider adding these negative keywords: {', '.join(negatives[:3])}",
                        "Review the search terms report weekly",
                        "Check whether search intent matches your offer",
                    ],
                    severity=Severity.HIGH,
                ),
                details,
            )

        return self.ok_result({
            "message": "Search term waste below threshold",
            "total_waste": round(total_waste, 2),
            "term_count": count,
            "suggested_negatives": negatives[:5],
        })

    @staticmethod
    def _parse(row: Dict[str, Any]) -> Dict[str, Any]:
        metrics = row.get("metrics", {})
        return {
            "search_term": row.get("searchTermView", {}).get("searchTerm", ""),
            "campaign_name": row.get("campaign", {}).get("name", "Unknown"),
            "ad_group_name": row.get("adGroup", {}).get("name", "Unknown"),
            "clicks": to_int(metrics.get("clicks")),
            "cost": round(micros_to_amount(metrics.get("costMicros")), 2),
            "conversions": to_float(metrics.get("conversions")),
            "impressions": to_int(metrics.get("impressions")),
        }
