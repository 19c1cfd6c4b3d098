"""Tests for the conversion tracking check."""

import pytest

from ads_monitor.checks.tracking import ConversionTrackingCheck
from ads_monitor.models.base import CheckStatus, Severity

ACTIONS = [{"conversionAction": {"id": "1", "name": "Purchase", "status": "ENABLED"}}]


def campaign_row(campaign_id, cost, clicks, conversions=0.0, all_conversions=0.0):
    return {
        "campaign": {"id": campaign_id, "name": f"Campaign {campaign_id}", "status": "ENABLED"},
        "metrics": {
            "costMicros": str(int(cost * 1_000_000)),
            "clicks": str(clicks),
            "conversions": conversions,
            "allConversions": all_conversions,
        },
    }


class TestConversionTrackingCheck:
    """Test conversion tracking check."""

    @pytest.mark.asyncio
    async def test_tracking_works(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM conversion_action": ACTIONS,
            "FROM campaign": [campaign_row("1", 300.0, 120, conversions=4)],
        })

        result = await ConversionTrackingCheck().run(client, tenant, check_logger)

        assert result.is_ok
        assert result.details["total_conversions"] == 4

    @pytest.mark.asyncio
    async def test_no_conversion_actions_and_no_data(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({"FROM conversion_action": [], "FROM campaign": []})

        result = await ConversionTrackingCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.alert_data.title == "Google Ads: conversion tracking not set up"
        assert result.alert_data.severity == Severity.HIGH

    @pytest.mark.asyncio
    async def test_campaign_spending_without_conversions(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM conversion_action": ACTIONS,
            "FROM campaign": [
                campaign_row("1", 150.0, 60),
                campaign_row("2", 80.0, 40, conversions=3),
            ],
        })

        result = await ConversionTrackingCheck().run(client, tenant, check_logger)

        assert result.status == CheckStatus.ERROR
        assert result.count == 1
        assert result.alert_data.severity == Severity.HIGH
        assert result.alert_data.details["zero_conversion_campaigns"] == 1
        assert "€150.00" in result.alert_data.impact

    @pytest.mark.asyncio
    async def test_account_without_any_conversion_is_critical(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM conversion_action": ACTIONS,
            "FROM campaign": [campaign_row("1", 150.0, 60), campaign_row("2", 90.0, 20)],
        })

        result = await ConversionTrackingCheck().run(client, tenant, check_logger)

        types = [issue["type"] for issue in result.details["issues"]]
        assert types == ["zero_conversions", "account_zero_conversions"]
        assert result.alert_data.severity == Severity.CRITICAL

    @pytest.mark.asyncio
    async def test_low_traffic_campaigns_are_ignored(self, make_ads_client, tenant, check_logger):
        client = make_ads_client({
            "FROM conversion_action": ACTIONS,
            "FROM campaign": [campaign_row("1", 150.0, 30, all_conversions=1)],
        })

        result = await ConversionTrackingCheck().run(client, tenant, check_logger)

        assert result.is_ok
