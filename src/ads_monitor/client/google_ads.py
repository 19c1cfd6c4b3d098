"""Read-only Google Ads API client."""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..auth.base import TokenProvider
from ..auth.google_ads import OAuthTokenManager
from ..constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
    GOOGLE_ADS_API_BASE,
)
from ..exceptions import GoogleAdsClientError, is_retryable_error
from ..models.tenants import GoogleAdsCredentials, TenantConfig

logger = logging.getLogger(__name__)

VERIFY_QUERY = "SELECT customer.id, customer.descriptive_name FROM customer LIMIT 1"

CUSTOMER_INFO_QUERY = """
    SELECT
      customer.id,
      customer.descriptive_name,
      customer.currency_code,
      customer.time_zone
    FROM customer
    LIMIT 1
"""


@dataclass
class QueryResponse:
    """Rows returned by a single GAQL query."""
    results: List[Dict[str, Any]] = field(default_factory=list)
    request_id: str = ""


@dataclass
class CustomerInfo:
    """Basic account information."""
    id: str
    descriptive_name: str
    currency_code: str
    time_zone: str


def normalize_customer_id(customer_id: str) -> str:
    """Strip whitespace and dashes from a customer ID."""
    return customer_id.strip().replace("-", "")


def _results_of(payload: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(payload, list):
        for batch in payload:
            yield from _results_of(batch)
    elif isinstance(payload, dict):
        yield from payload.get("results") or []


def parse_stream_response(body: str) -> Iterator[Dict[str, Any]]:
    """Yield result rows from a searchStream response body.

    The body is either one JSON document (an array of batches or a single
    batch) or newline-delimited JSON batches. Lines that do not parse are
    skipped.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        pass
    else:
        yield from _results_of(payload)
        return

    for line in body.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            batch = json.loads(line)
        except ValueError:
            continue
        yield from _results_of(batch)


class GoogleAdsClient:
    """Executes GAQL queries for one customer account."""

    def __init__(
        self,
        credentials: GoogleAdsCredentials,
        customer_id: str,
        http_client: Optional[httpx.AsyncClient] = None,
        token_provider: Optional[TokenProvider] = None,
        api_base: str = GOOGLE_ADS_API_BASE,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            credentials: Credentials of the account
            customer_id: Customer ID, dashes allowed
            http_client: Shared HTTP client; one is created when omitted
            token_provider: Source of bearer tokens; defaults to a refresh token manager
            api_base: Versioned API base URL
            retry_attempts: Retries after the first attempt for transient failures
            retry_delay: Base delay in seconds for exponential backoff
            timeout: Request timeout in seconds
            sleep: Coroutine used to wait between attempts
        """
        self.credentials = credentials
        self.customer_id = normalize_customer_id(customer_id)
        self.api_base = api_base.rstrip("/")
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.sleep = sleep

        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self.token_provider = token_provider or OAuthTokenManager(credentials, self.http_client)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def for_tenant(cls, tenant: TenantConfig, **kwargs) -> "GoogleAdsClient":
        """Create a client bound to a tenant's account and credentials."""
        return cls(tenant.credentials, tenant.account_id, **kwargs)

    async def __aenter__(self) -> "GoogleAdsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    @property
    def search_stream_url(self) -> str:
        return f"{self.api_base}/customers/{self.customer_id}/googleAds:searchStream"

    async def query(self, gaql: str) -> QueryResponse:
        """Execute a GAQL query, retrying transient failures with backoff."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts + 1),
            wait=wait_exponential(multiplier=self.retry_delay, min=0),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=before_sleep_log(self.logger, logging.WARNING),
            reraise=True,
            sleep=self.sleep,
        )

        async for attempt in retrying:
            with attempt:
                return await self._execute_query(gaql)

    async def _execute_query(self, gaql: str) -> QueryResponse:
        access_token = await self.token_provider.get_access_token()

        headers = {
            "Authorization": f"Bearer {access_token}",
            "developer-token": self.credentials.developer_token,
            "Content-Type": "application/json",
        }
        if self.credentials.login_customer_id:
            headers["login-customer-id"] = normalize_customer_id(self.credentials.login_customer_id)

        response = await self.http_client.post(
            self.search_stream_url,
            json={"query": gaql},
            headers=headers,
        )

        if response.status_code >= 400:
            raise GoogleAdsClientError(
                f"Google Ads API error: {response.status_code}",
                status_code=response.status_code,
                details=response.text,
            )

        request_id = response.headers.get("x-goog-request-id") or str(uuid.uuid4())
        results = list(parse_stream_response(response.text))

        self.logger.debug(
            f"Query for customer {self.customer_id} returned {len(results)} rows (request {request_id})"
        )
        return QueryResponse(results=results, request_id=request_id)

    async def verify_connection(self) -> bool:
        """Run a trivial query to confirm the credentials work."""
        try:
            await self.query(VERIFY_QUERY)
            return True
        except Exception as e:
            self.logger.error(f"Connection verification failed for customer {self.customer_id}: {e}")
            return False

    async def get_customer_info(self) -> CustomerInfo:
        """Fetch basic information about the account."""
        response = await self.query(CUSTOMER_INFO_QUERY)
        if not response.results:
            raise GoogleAdsClientError(f"No customer data returned for {self.customer_id}")

        customer = response.results[0].get("customer", {})
        return CustomerInfo(
            id=str(customer.get("id", self.customer_id)),
            descriptive_name=customer.get("descriptiveName", ""),
            currency_code=customer.get("currencyCode", ""),
            time_zone=customer.get("timeZone", ""),
        )
