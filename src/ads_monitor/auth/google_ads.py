"""Google OAuth token handling for the Google Ads API."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode

import httpx

from ..exceptions import GoogleAdsAuthError
from ..constants import (
    GOOGLE_ADS_SCOPE,
    OAUTH_AUTHORIZE_URL,
    OAUTH_TOKEN_URL,
    TOKEN_REFRESH_MARGIN_SECONDS,
)
from ..models.tenants import GoogleAdsCredentials
from .base import AccessToken, BrowserAuthFlow, OAuthGrant, TokenProvider

logger = logging.getLogger(__name__)


async def _post_token_request(http_client: httpx.AsyncClient, token_url: str, data: dict) -> dict:
    """POST a form to the token endpoint and return the decoded payload."""
    response = await http_client.post(
        token_url,
        data=data,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    if response.status_code >= 400:
        raise GoogleAdsAuthError(
            f"Failed to obtain access token: {response.status_code} {response.text}",
            status_code=response.status_code,
            details=response.text,
        )

    return response.json()


class OAuthTokenManager(TokenProvider):
    """Caches an access token obtained through the refresh token grant.

    One manager belongs to one set of credentials; tokens are never shared
    between tenants.
    """

    def __init__(
        self,
        credentials: GoogleAdsCredentials,
        http_client: httpx.AsyncClient,
        token_url: str = OAUTH_TOKEN_URL,
        refresh_margin: int = TOKEN_REFRESH_MARGIN_SECONDS,
    ) -> None:
        """Initialize the token manager.

        Args:
            credentials: Credentials holding the client id/secret and refresh token
            http_client: HTTP client used for the token exchange
            token_url: OAuth token endpoint
            refresh_margin: Seconds of remaining validity required to reuse a token
        """
        self.credentials = credentials
        self.http_client = http_client
        self.token_url = token_url
        self.refresh_margin = refresh_margin
        self._token: Optional[AccessToken] = None
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def cached_token(self) -> Optional[AccessToken]:
        """Currently cached token, if any."""
        return self._token

    async def get_access_token(self) -> str:
        """Return the cached token or refresh it when close to expiry."""
        if self._token and self._token.is_valid_for(self.refresh_margin):
            return self._token.token

        self._token = await self.refresh()
        return self._token.token

    async def refresh(self) -> AccessToken:
        """Exchange the refresh token for a new access token."""
        self.logger.debug("Refreshing Google Ads access token")

        payload = await _post_token_request(
            self.http_client,
            self.token_url,
            {
                "client_id": self.credentials.client_id,
                "client_secret": self.credentials.client_secret,
                "refresh_token": self.credentials.refresh_token,
                "grant_type": "refresh_token",
            },
        )

        return AccessToken(
            token=payload["access_token"],
            expires_at=datetime.utcnow() + timedelta(seconds=int(payload.get("expires_in", 3600))),
        )


class GoogleAdsOAuthFlow(BrowserAuthFlow):
    """Browser consent flow that yields a refresh token for a new client."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        port: int = 8080,
        timeout: int = 300,
        authorize_url: str = OAUTH_AUTHORIZE_URL,
        token_url: str = OAUTH_TOKEN_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(port=port, timeout=timeout)
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.http_client = http_client

    def get_auth_url(self, state: Optional[str] = None) -> str:
        """Build the consent URL requesting offline access to the Ads API."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": GOOGLE_ADS_SCOPE,
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{self.authorize_url}?{urlencode(params)}"

    async def handle_callback(self, code: str, state: Optional[str] = None) -> OAuthGrant:
        """Exchange an authorization code for access and refresh tokens."""
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.callback_url,
            "grant_type": "authorization_code",
        }

        if self.http_client is not None:
            payload = await _post_token_request(self.http_client, self.token_url, data)
        else:
            async with httpx.AsyncClient(timeout=30.0) as http_client:
                payload = await _post_token_request(http_client, self.token_url, data)

        return OAuthGrant(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_at=datetime.utcnow() + timedelta(seconds=int(payload.get("expires_in", 3600))),
            scope=payload.get("scope"),
        )
