"""Pytest configuration and shared fixtures."""

import logging
from typing import Any, Dict, List, Union
from unittest.mock import AsyncMock

import pytest

from ads_monitor.client.google_ads import QueryResponse
from ads_monitor.database.connection import DatabaseConnection
from ads_monitor.models.tenants import GoogleAdsCredentials, TenantConfig

QueryRows = Union[List[Dict[str, Any]], Exception]


@pytest.fixture
def credentials():
    """Credentials for a test account."""
    return GoogleAdsCredentials(
        developer_token="dev-token",
        client_id="client-id.apps.googleusercontent.com",
        client_secret="client-secret",
        refresh_token="refresh-token",
    )


@pytest.fixture
def tenant(credentials):
    """A monitored client using default thresholds."""
    return TenantConfig(
        tenant_id="client-1",
        tenant_name="Bakkerij Jansen",
        account_id="1234567890",
        credentials=credentials,
    )


@pytest.fixture
def check_logger():
    """Logger handed to checks."""
    return logging.getLogger("tests.checks")


@pytest.fixture
def make_ads_client():
    """Build a mock Google Ads client answering queries by text fragment.

    ``responses`` maps a fragment of the GAQL text to the rows to return, or to
    an exception to raise. The first matching fragment wins; unmatched queries
    return no rows.
    """
    def factory(responses: Dict[str, QueryRows]) -> AsyncMock:
        client = AsyncMock()

        async def query(gaql: str) -> QueryResponse:
            for fragment, rows in responses.items():
                if fragment in gaql:
                    if isinstance(rows, Exception):
                        raise rows
                    return QueryResponse(results=list(rows), request_id="test")
            return QueryResponse(results=[], request_id="test")

        client.query.side_effect = query
        client.verify_connection.return_value = True
        return client

    return factory


@pytest.fixture
def db():
    """In-memory database with all tables created."""
    connection = DatabaseConnection("sqlite:///:memory:")
    connection.create_tables()
    yield connection
    connection.close()


@pytest.fixture
def period_rows():
    """Build account metrics rows in API format."""
    def factory(conversions=0.0, value=0.0, cost=0.0, clicks=0, impressions=0) -> List[Dict[str, Any]]:
        return [{
            "metrics": {
                "conversions": conversions,
                "conversionsValue": value,
                "costMicros": str(int(round(cost * 1_000_000))),
                "clicks": str(clicks),
                "impressions": str(impressions),
            }
        }]

    return factory
