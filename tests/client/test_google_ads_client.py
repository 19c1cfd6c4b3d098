"""Tests for the Google Ads API client and token handling."""

import json
from datetime import datetime, timedelta

import httpx
import pytest

from ads_monitor.auth.base import AccessToken
from ads_monitor.auth.google_ads import GoogleAdsOAuthFlow, OAuthTokenManager
from ads_monitor.client.google_ads import (
    GoogleAdsClient,
    normalize_customer_id,
    parse_stream_response,
)
from ads_monitor.constants import OAUTH_TOKEN_URL
from ads_monitor.exceptions import GoogleAdsAuthError, GoogleAdsClientError


class FakeAdsApi:
    """Request handler standing in for the token and searchStream endpoints."""

    def __init__(self, search_responses=None, token_status=200):
        self.search_responses = list(search_responses or [])
        self.token_status = token_status
        self.token_requests = []
        self.search_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == OAUTH_TOKEN_URL:
            self.token_requests.append(request)
            if self.token_status != 200:
                return httpx.Response(self.token_status, text='{"error": "invalid_grant"}')
            return httpx.Response(200, json={
                "access_token": f"access-{len(self.token_requests)}",
                "expires_in": 3600,
                "token_type": "Bearer",
            })

        self.search_requests.append(request)
        if self.search_responses:
            status, body = self.search_responses.pop(0)
        else:
            status, body = 200, [{"results": []}]
        return httpx.Response(status, text=json.dumps(body) if not isinstance(body, str) else body)


def make_client(credentials, api, **kwargs):
    kwargs.setdefault("retry_delay", 0)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(api))
    client = GoogleAdsClient(credentials, "123-456-7890", http_client=http_client, **kwargs)
    return client, http_client


class TestParsing:
    """Test response parsing helpers."""

    def test_normalize_customer_id(self):
        assert normalize_customer_id(" 123-456-7890 ") == "1234567890"

    def test_parse_array_of_batches(self):
        body = json.dumps([
            {"results": [{"campaign": {"id": "1"}}]},
            {"results": [{"campaign": {"id": "2"}}]},
            {"fieldMask": "campaign.id"},
        ])
        rows = list(parse_stream_response(body))
        assert [r["campaign"]["id"] for r in rows] == ["1", "2"]

    def test_parse_single_batch(self):
        body = json.dumps({"results": [{"customer": {"id": "9"}}]})
        assert list(parse_stream_response(body)) == [{"customer": {"id": "9"}}]

    def test_parse_newline_delimited_batches_skips_garbage(self):
        body = "\n".join([
            json.dumps({"results": [{"campaign": {"id": "1"}}]}),
            "not json",
            "",
            json.dumps({"results": [{"campaign": {"id": "2"}}]}),
        ])
        rows = list(parse_stream_response(body))
        assert len(rows) == 2


class TestGoogleAdsClient:
    """Test GAQL query execution."""

    @pytest.mark.asyncio
    async def test_query_sends_expected_headers(self, credentials):
        api = FakeAdsApi([(200, [{"results": [{"campaign": {"id": "1"}}]}])])
        creds = credentials.model_copy(update={"login_customer_id": "111-222-3333"})
        client, http_client = make_client(creds, api)

        async with http_client:
            response = await client.query("SELECT campaign.id FROM campaign")

        assert response.results == [{"campaign": {"id": "1"}}]
        request = api.search_requests[0]
        assert request.url.path.endswith("/customers/1234567890/googleAds:searchStream")
        assert request.headers["Authorization"] == "Bearer access-1"
        assert request.headers["developer-token"] == "dev-token"
        assert request.headers["login-customer-id"] == "1112223333"
        assert json.loads(request.content) == {"query": "SELECT campaign.id FROM campaign"}

    @pytest.mark.asyncio
    async def test_access_token_is_reused(self, credentials):
        api = FakeAdsApi()
        client, http_client = make_client(credentials, api)

        async with http_client:
            await client.query("SELECT customer.id FROM customer")
            await client.query("SELECT customer.id FROM customer")

        assert len(api.token_requests) == 1
        assert len(api.search_requests) == 2

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self, credentials):
        api = FakeAdsApi([(503, "unavailable")] * 3)
        client, http_client = make_client(credentials, api)

        async with http_client:
            with pytest.raises(GoogleAdsClientError) as exc_info:
                await client.query("SELECT customer.id FROM customer")

        assert exc_info.value.status_code == 503
        assert len(api.search_requests) == 3

    @pytest.mark.asyncio
    async def test_backoff_doubles_between_attempts(self, credentials):
        api = FakeAdsApi([(503, "unavailable")] * 3)
        waits = []

        async def record_sleep(seconds):
            waits.append(seconds)

        client, http_client = make_client(credentials, api, retry_delay=1, sleep=record_sleep)

        async with http_client:
            with pytest.raises(GoogleAdsClientError):
                await client.query("SELECT customer.id FROM customer")

        assert waits == [1, 2]
        assert len(api.search_requests) == 3

    @pytest.mark.asyncio
    async def test_retry_recovers_after_transient_failure(self, credentials):
        api = FakeAdsApi([
            (500, "internal"),
            (200, [{"results": [{"customer": {"id": "1"}}]}]),
        ])
        client, http_client = make_client(credentials, api)

        async with http_client:
            response = await client.query("SELECT customer.id FROM customer")

        assert len(response.results) == 1
        assert len(api.search_requests) == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, credentials):
        api = FakeAdsApi([(400, '{"error": {"status": "INVALID_ARGUMENT"}}')])
        client, http_client = make_client(credentials, api)

        async with http_client:
            with pytest.raises(GoogleAdsClientError) as exc_info:
                await client.query("SELECT nonsense FROM customer")

        assert exc_info.value.status_code == 400
        assert "INVALID_ARGUMENT" in exc_info.value.details
        assert len(api.search_requests) == 1

    @pytest.mark.asyncio
    async def test_auth_failure_is_not_retried(self, credentials):
        api = FakeAdsApi(token_status=400)
        client, http_client = make_client(credentials, api)

        async with http_client:
            with pytest.raises(GoogleAdsAuthError):
                await client.query("SELECT customer.id FROM customer")

        assert len(api.token_requests) == 1
        assert api.search_requests == []

    @pytest.mark.asyncio
    async def test_verify_connection(self, credentials):
        api = FakeAdsApi([(200, [{"results": [{"customer": {"id": "1234567890"}}]}])])
        client, http_client = make_client(credentials, api)

        async with http_client:
            assert await client.verify_connection() is True

    @pytest.mark.asyncio
    async def test_verify_connection_failure_returns_false(self, credentials):
        api = FakeAdsApi([(403, "PERMISSION_DENIED")])
        client, http_client = make_client(credentials, api)

        async with http_client:
            assert await client.verify_connection() is False

    @pytest.mark.asyncio
    async def test_get_customer_info(self, credentials):
        api = FakeAdsApi([(200, [{"results": [{"customer": {
            "id": "1234567890",
            "descriptiveName": "Bakkerij Jansen",
            "currencyCode": "EUR",
            "timeZone": "Europe/Amsterdam",
        }}]}])])
        client, http_client = make_client(credentials, api)

        async with http_client:
            info = await client.get_customer_info()

        assert info.descriptive_name == "Bakkerij Jansen"
        assert info.currency_code == "EUR"
        assert info.time_zone == "Europe/Amsterdam"

    @pytest.mark.asyncio
    async def test_close_leaves_shared_http_client_open(self, credentials):
        api = FakeAdsApi()
        client, http_client = make_client(credentials, api)

        await client.close()
        assert not http_client.is_closed
        await http_client.aclose()


class TestOAuthTokenManager:
    """Test access token caching."""

    @pytest.mark.asyncio
    async def test_refreshes_token_close_to_expiry(self, credentials):
        api = FakeAdsApi()
        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as http_client:
            manager = OAuthTokenManager(credentials, http_client, refresh_margin=60)
            manager._token = AccessToken(
                token="stale",
                expires_at=datetime.utcnow() + timedelta(seconds=30),
            )

            token = await manager.get_access_token()

        assert token == "access-1"
        assert manager.cached_token.token == "access-1"

    @pytest.mark.asyncio
    async def test_refresh_sends_refresh_token_grant(self, credentials):
        api = FakeAdsApi()
        async with httpx.AsyncClient(transport=httpx.MockTransport(api)) as http_client:
            await OAuthTokenManager(credentials, http_client).get_access_token()

        form = dict(httpx.QueryParams(api.token_requests[0].content.decode()))
        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "refresh-token"


class TestGoogleAdsOAuthFlow:
    """Test the browser consent flow helpers."""

    def test_auth_url_requests_offline_access(self):
        flow = GoogleAdsOAuthFlow("client-id", "secret", port=9000)
        url = flow.get_auth_url(state="abc")

        params = httpx.URL(url).params
        assert params["access_type"] == "offline"
        assert params["prompt"] == "consent"
        assert params["state"] == "abc"
        assert params["redirect_uri"] == "http://localhost:9000/callback"
        assert "adwords" in params["scope"]

    @pytest.mark.asyncio
    async def test_handle_callback_exchanges_code(self):
        def handler(request):
            return httpx.Response(200, json={
                "access_token": "access",
                "refresh_token": "new-refresh",
                "expires_in": 3599,
                "scope": "https://www.googleapis.com/auth/adwords",
            })

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            flow = GoogleAdsOAuthFlow("client-id", "secret", http_client=http_client)
            grant = await flow.handle_callback("auth-code")

        assert grant.refresh_token == "new-refresh"
        assert grant.expires_at > datetime.utcnow()
