"""Tests for the critical checks."""

import pytest

from ads_monitor.checks.critical import DisapprovedAdsCheck, LandingPageErrorsCheck, PaymentIssuesCheck
from ads_monitor.checks.critical.landing_page_errors import is_landing_page_topic
from ads_monitor.models.base import CheckCategory, CheckStatus, Severity


def disapproved_row(ad_id, topics=("ALCOHOL",)):
    return {
        "adGroupAd": {
            "ad": {"id": ad_id, "name": f"Ad {ad_id}"},
            "policySummary": {
                "approvalStatus": "DISAPPROVED",
                "policyTopicEntries": [{"topic": topic, "type": "PROHIBITED"} for topic in topics],
            },
        },
        "adGroup": {"id": "10", "name": "Brood"},
        "campaign": {"id": "100", "name": "Search NL"},
    }


class TestPaymentIssuesCheck:
    """Test payment issues check."""

    def test_check_properties(self):
        check = PaymentIssuesCheck()
        assert check.id == "payment_issues"
        assert check.category == CheckCategory.CRITICAL

    @pytest.mark.asyncio
    async def test_healthy_account(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM customer": [{"customer": {"id": "1", "status": "ENABLED"}}],
            "FROM billing_setup": [{"billingSetup": {"id": "5", "status": "APPROVED"}}],
        })

        result = await PaymentIssuesCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.OK
        assert result.count == 0

    @pytest.mark.asyncio
    async def test_suspended_account_is_critical(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM customer": [{"customer": {"id": "1", "status": "SUSPENDED"}}],
            "FROM billing_setup": [{"billingSetup": {"id": "5", "status": "APPROVED"}}],
        })

        result = await PaymentIssuesCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.alert_data.severity == Severity.CRITICAL
        assert result.alert_data.details["issue_types"] == ["account_suspended"]

    @pytest.mark.asyncio
    async def test_missing_billing_setup_is_high(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM customer": [{"customer": {"id": "1", "status": "ENABLED"}}],
            "FROM billing_setup": [],
        })

        result = await PaymentIssuesCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.alert_data.severity == Severity.HIGH
        assert result.details["issues"][0]["type"] == "no_billing_setup"

    @pytest.mark.asyncio
    async def test_billing_query_failure_is_ignored(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM customer": [{"customer": {"id": "1", "status": "ENABLED"}}],
            "FROM billing_setup": RuntimeError("PERMISSION_DENIED"),
        })

        result = await PaymentIssuesCheck().run(client, tenant, check_logger)

        assert result.is_ok

    @pytest.mark.asyncio
    async def test_account_query_failure_propagates(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM customer": RuntimeError("boom")})

        with pytest.raises(RuntimeError):
            await PaymentIssuesCheck().run(client, tenant, check_logger)


class TestDisapprovedAdsCheck:
    """Test disapproved ads check."""

    @pytest.mark.asyncio
    async def test_no_disapproved_ads(self, make_ads_client, tenant, check_logger):
        result = await DisapprovedAdsCheck().run(make_ads_client({}), tenant, check_logger)
        assert result.is_ok

    @pytest.mark.asyncio
    async def test_few_disapproved_ads_are_high(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM ad_group_ad": [disapproved_row("1"), disapproved_row("2", ("TRADEMARKS", "ALCOHOL"))],
        })

        result = await DisapprovedAdsCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 2
        assert result.alert_data.severity == Severity.HIGH
        assert result.alert_data.details["policy_topics"] == ["ALCOHOL", "TRADEMARKS"]

    @pytest.mark.asyncio
    async def test_many_disapproved_ads_are_critical(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM ad_group_ad": [disapproved_row(str(i)) for i in range(6)]})

        result = await DisapprovedAdsCheck().run(client, tenant, check_logger)

        assert result.count == 6
        assert result.alert_data.severity == Severity.CRITICAL
        assert result.alert_data.short_description == "6 ads disapproved"


class TestLandingPageErrorsCheck:
    """Test landing page errors check."""

    def test_landing_page_topics(self):
        assert is_landing_page_topic("DESTINATION_NOT_WORKING")
        assert is_landing_page_topic("MALWARE")
        assert not is_landing_page_topic("ALCOHOL")
        assert not is_landing_page_topic(None)

    @pytest.mark.asyncio
    async def test_only_destination_findings_are_reported(self, make_ads_client, tenant, check_logger):
        rows = [
            {
                "adGroupAd": {
                    "ad": {"id": "1", "finalUrls": ["https://example.nl/a"]},
                    "policySummary": {"policyTopicEntries": [{"topic": "DESTINATION_NOT_WORKING"}]},
                },
                "adGroup": {"name": "AG"},
                "campaign": {"name": "C"},
            },
            # Same ad on another day
            {
                "adGroupAd": {
                    "ad": {"id": "1", "finalUrls": ["https://example.nl/a"]},
                    "policySummary": {"policyTopicEntries": [{"topic": "DESTINATION_NOT_WORKING"}]},
                },
            },
            {
                "adGroupAd": {
                    "ad": {"id": "2", "finalUrls": ["https://example.nl/b"]},
                    "policySummary": {"policyTopicEntries": [{"topic": "ALCOHOL"}]},
                },
            },
        ]
        client = make_ads_client({"FROM ad_group_ad": rows})

        result = await LandingPageErrorsCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 1
        assert result.alert_data.severity == Severity.CRITICAL
        assert result.details["issues"][0]["url"] == "https://example.nl/a"

    @pytest.mark.asyncio
    async def test_no_findings(self, make_ads_client, tenant, check_logger):
        result = await LandingPageErrorsCheck().run(make_ads_client({}), tenant, check_logger)
        assert result.is_ok
