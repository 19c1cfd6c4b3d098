"""Base authentication interfaces."""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field


class AccessToken(BaseModel):
    """Short-lived bearer token."""

    token: str = Field(..., description="Bearer token value")
    expires_at: datetime = Field(..., description="Token expiration time (UTC)")

    def is_valid_for(self, seconds: float) -> bool:
        """Check the token stays valid for at least the given number of seconds."""
        return datetime.utcnow() + timedelta(seconds=seconds) < self.expires_at


class OAuthGrant(BaseModel):
    """Tokens returned by an authorization code exchange."""

    access_token: str = Field(..., description="Bearer token value")
    refresh_token: Optional[str] = Field(None, description="Refresh token, present on first consent")
    expires_at: datetime = Field(..., description="Access token expiration time (UTC)")
    scope: Optional[str] = Field(None, description="Granted scopes")


class TokenProvider(ABC):
    """Source of bearer tokens for API requests."""

    @abstractmethod
    async def get_access_token(self) -> str:
        """Return a bearer token that is valid for the next request."""
        pass


class BrowserAuthFlow(ABC):
    """Authorization flow that completes in the user's browser."""

    def __init__(self, port: int = 8080, timeout: int = 300) -> None:
        """Initialize browser auth flow.

        Args:
            port: Local port for OAuth callback
            timeout: Timeout in seconds for auth flow
        """
        self.port = port
        self.timeout = timeout
        self.callback_url = f"http://localhost:{port}/callback"

    @abstractmethod
    def get_auth_url(self, state: Optional[str] = None) -> str:
        """Get the authentication URL to open in browser."""
        pass

    @abstractmethod
    async def handle_callback(self, code: str, state: Optional[str] = None) -> OAuthGrant:
        """Exchange the callback's authorization code for tokens."""
        pass

    async def start_local_server(self) -> asyncio.Queue:
        """Start local server to handle OAuth callback.

        Returns:
            Queue to receive callback parameters
        """
        from aiohttp import web

        callback_queue = asyncio.Queue()

        async def handle_callback(request):
            """Handle OAuth callback request."""
            code = request.query.get('code')
            state = request.query.get('state')
            error = request.query.get('error')

            if error:
                await callback_queue.put({"error": error})
                return web.Response(
                    text="Authorization failed. You can close this window.",
                    content_type="text/html"
                )

            if code:
                await callback_queue.put({"code": code, "state": state})
                return web.Response(
                    text="Authorization successful! You can close this window.",
                    content_type="text/html"
                )

            return web.Response(text="Invalid callback parameters.", status=400)

        app = web.Application()
        app.router.add_get('/callback', handle_callback)

        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, 'localhost', self.port)
        await site.start()

        self._runner = runner

        return callback_queue

    async def stop_local_server(self) -> None:
        """Stop the local OAuth server."""
        if hasattr(self, '_runner'):
            await self._runner.cleanup()

    async def authorize(self, state: Optional[str] = None) -> OAuthGrant:
        """Run the full browser flow and return the granted tokens."""
        import webbrowser

        callback_queue = await self.start_local_server()

        try:
            webbrowser.open(self.get_auth_url(state))

            try:
                callback_data = await asyncio.wait_for(
                    callback_queue.get(),
                    timeout=self.timeout
                )
            except asyncio.TimeoutError:
                raise TimeoutError(f"Authorization timeout after {self.timeout} seconds")

            if "error" in callback_data:
                raise PermissionError(f"Authorization error: {callback_data['error']}")

            if state is not None and callback_data.get("state") != state:
                raise PermissionError("Authorization state mismatch")

            return await self.handle_callback(
                callback_data["code"],
                callback_data.get("state")
            )

        finally:
            await self.stop_local_server()
