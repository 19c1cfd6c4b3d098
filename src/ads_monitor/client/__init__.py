"""Google Ads API access."""

from .google_ads import (
    CustomerInfo,
    GoogleAdsClient,
    QueryResponse,
    normalize_customer_id,
    parse_stream_response,
)

__all__ = [
    'CustomerInfo',
    'GoogleAdsClient',
    'QueryResponse',
    'normalize_customer_id',
    'parse_stream_response',
]
