"""Tests for the account hygiene checks."""

import pytest

from ads_monitor.checks.hygiene import (
    AdGroupWithoutAdsCheck,
    KeywordConflictsCheck,
    LowAdStrengthCheck,
    LowQualityScoreCheck,
)
from ads_monitor.models.base import CheckStatus, Severity


def keyword_row(text, ad_group_id, match_type="EXACT", quality_score=None, impressions=0, cost=0.0,
                landing_page="AVERAGE", expected_ctr="AVERAGE", ad_relevance="AVERAGE"):
    row = {
        "adGroupCriterion": {
            "criterionId": f"{ad_group_id}-{text}",
            "keyword": {"text": text, "matchType": match_type},
        },
        "adGroup": {"id": ad_group_id, "name": f"Ad group {ad_group_id}"},
        "campaign": {"id": "1", "name": "Search NL"},
        "metrics": {
            "impressions": str(impressions),
            "clicks": "10",
            "costMicros": str(int(cost * 1_000_000)),
        },
    }
    if quality_score is not None:
        row["adGroupCriterion"]["qualityInfo"] = {
            "qualityScore": quality_score,
            "creativeLandingPageQuality": landing_page,
            "searchPredictedCtr": expected_ctr,
            "postClickQualityScore": ad_relevance,
        }
    return row


def rsa_row(ad_id, strength, impressions=500, cost=20.0, headlines=5, descriptions=2):
    return {
        "adGroupAd": {
            "adStrength": strength,
            "ad": {
                "id": ad_id,
                "responsiveSearchAd": {
                    "headlines": [{"text": f"Headline {i}"} for i in range(headlines)],
                    "descriptions": [{"text": f"Description {i}"} for i in range(descriptions)],
                },
            },
        },
        "adGroup": {"name": "Brood"},
        "campaign": {"name": "Search NL"},
        "metrics": {"impressions": str(impressions), "clicks": "10", "costMicros": str(int(cost * 1_000_000))},
    }


class TestLowQualityScoreCheck:
    """Test low quality score check."""

    @pytest.mark.asyncio
    async def test_query_uses_floor(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({})

        result = await LowQualityScoreCheck(quality_score_floor=5).run(client, tenant, check_logger)

        assert result.is_ok
        assert "quality_score < 5" in client.query.call_args[0][0]

    @pytest.mark.asyncio
    async def test_low_quality_keywords_flagged(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM keyword_view": [
            keyword_row("brood", "1", quality_score=2, impressions=400, cost=80.0, landing_page="BELOW_AVERAGE"),
            keyword_row("taart", "1", quality_score=3, impressions=150, cost=20.0, expected_ctr="BELOW_AVERAGE"),
            keyword_row("koek", "1", quality_score=2, impressions=50, cost=5.0),
        ]})

        result = await LowQualityScoreCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 2
        assert result.alert_data.severity == Severity.MEDIUM
        assert result.details["issue_breakdown"] == {"landing_page": 1, "expected_ctr": 1, "ad_relevance": 0}
        assert result.details["keywords"][0]["keyword"] == "brood"
        assert any("landing pages" in action for action in result.alert_data.suggested_actions)

    @pytest.mark.asyncio
    async def test_high_spend_is_high_severity(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM keyword_view": [
            keyword_row("brood", "1", quality_score=2, impressions=4000, cost=600.0),
        ]})

        result = await LowQualityScoreCheck().run(client, tenant, check_logger)

        assert result.alert_data.severity == Severity.HIGH


class TestLowAdStrengthCheck:
    """Test low ad strength check."""

    @pytest.mark.asyncio
    async def test_strong_ads_are_ok(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM ad_group_ad": [rsa_row("1", "EXCELLENT"), rsa_row("2", "GOOD")]})

        result = await LowAdStrengthCheck().run(client, tenant, check_logger)

        assert result.is_ok
        assert result.details["excellent_count"] == 1

    @pytest.mark.asyncio
    async def test_weak_ads_flagged_with_recommendations(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM ad_group_ad": [
            rsa_row("1", "POOR", cost=40.0),
            rsa_row("2", "AVERAGE", cost=10.0),
            rsa_row("3", "POOR", impressions=20),
        ]})

        result = await LowAdStrengthCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 2
        assert result.alert_data.severity == Severity.MEDIUM
        assert result.alert_data.details["poor_count"] == 1
        worst = result.details["ads"][0]
        assert worst["ad_id"] == "1"
        assert "Add 3 headlines (currently 5)" in worst["recommendations"]
        assert "Add 2 descriptions (currently 2)" in worst["recommendations"]

    @pytest.mark.asyncio
    async def test_many_poor_ads_are_high(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM ad_group_ad": [rsa_row(str(i), "POOR") for i in range(4)]})

        result = await LowAdStrengthCheck().run(client, tenant, check_logger)

        assert result.alert_data.severity == Severity.HIGH


class TestKeywordConflictsCheck:
    """Test keyword conflicts check."""

    @pytest.mark.asyncio
    async def test_no_conflicts(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM keyword_view": [
            keyword_row("brood", "1"),
            keyword_row("brood", "2", match_type="PHRASE"),
        ]})

        result = await KeywordConflictsCheck().run(client, tenant, check_logger)

        assert result.is_ok

    @pytest.mark.asyncio
    async def test_same_keyword_in_several_ad_groups(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM keyword_view": [
            keyword_row("Brood ", "1"),
            keyword_row("brood", "2"),
            keyword_row("brood", "3"),
            keyword_row("taart", "1"),
            keyword_row("taart", "2"),
            # Repeated rows for one ad group count once
            keyword_row("koek", "1"),
            keyword_row("koek", "1"),
        ]})

        result = await KeywordConflictsCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 2
        assert result.alert_data.severity == Severity.HIGH
        assert result.alert_data.details["worst_offender"] == "brood"
        assert result.details["conflicts"][0]["count"] == 3


class TestAdGroupWithoutAdsCheck:
    """Test ad groups without ads check."""

    @pytest.mark.asyncio
    async def test_empty_ad_groups_flagged(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM ad_group_ad": [
                {"adGroup": {"id": "1"}, "adGroupAd": {"status": "ENABLED"}},
                {"adGroup": {"id": "2"}, "adGroupAd": {"status": "PAUSED"}},
                {"adGroup": {"id": "3"}, "adGroupAd": {"status": "REMOVED"}},
            ],
            "FROM ad_group": [
                {"adGroup": {"id": str(i), "name": f"AG {i}"}, "campaign": {"name": "Search NL"}}
                for i in range(1, 5)
            ],
        })

        result = await AdGroupWithoutAdsCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 2
        assert result.alert_data.severity == Severity.HIGH

    @pytest.mark.asyncio
    async def test_all_ad_groups_have_ads(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM ad_group_ad": [{"adGroup": {"id": "1"}, "adGroupAd": {"status": "ENABLED"}}],
            "FROM ad_group": [{"adGroup": {"id": "1", "name": "AG 1"}, "campaign": {"name": "C"}}],
        })

        result = await AdGroupWithoutAdsCheck().run(client, tenant, check_logger)

        assert result.is_ok
