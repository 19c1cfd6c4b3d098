"""Authentication for the Google Ads API."""

from .base import AccessToken, BrowserAuthFlow, OAuthGrant, TokenProvider
from .google_ads import GoogleAdsOAuthFlow, OAuthTokenManager

__all__ = [
    'AccessToken',
    'BrowserAuthFlow',
    'OAuthGrant',
    'TokenProvider',
    'GoogleAdsOAuthFlow',
    'OAuthTokenManager',
]
