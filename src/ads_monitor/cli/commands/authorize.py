"""Obtain a refresh token through the browser consent flow."""

import asyncio
import secrets
import sys
from typing import Optional

import click
from rich.console import Console

from ...auth.google_ads import GoogleAdsOAuthFlow
from ...directory.database import DatabaseClientDirectory
from ...exceptions import GoogleAdsClientError, MonitorConfigurationError
from ..cli_constants import (
    DEFAULT_OAUTH_PORT,
    DEFAULT_OAUTH_TIMEOUT,
    ERROR_CLIENT_NOT_FOUND,
    EXIT_ERROR,
)
from ..utils.config import get_app_credentials, get_config
from ..utils.database import open_database

console = Console()


@click.command()
@click.option(
    "--client",
    "client_ref",
    help="Store the refresh token on this client (id or customer id)",
)
@click.option("--port", type=int, default=DEFAULT_OAUTH_PORT, show_default=True, help="Local callback port")
@click.option(
    "--timeout",
    type=int,
    default=DEFAULT_OAUTH_TIMEOUT,
    show_default=True,
    help="Seconds to wait for the browser consent",
)
def authorize(client_ref: Optional[str], port: int, timeout: int) -> None:
    """Authorize access to a Google Ads account in the browser.

    Opens the Google consent screen and waits for the redirect on localhost.
    The granted refresh token is printed, or stored on a client with --client.
    """
    config = get_config()
    try:
        app_credentials = get_app_credentials(config)
    except MonitorConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_ERROR)

    flow = GoogleAdsOAuthFlow(
        client_id=app_credentials.client_id,
        client_secret=app_credentials.client_secret,
        port=port,
        timeout=timeout,
    )

    console.print("Opening browser for Google Ads authorization...")
    console.print(f"[dim]If it does not open, visit:[/dim] {flow.get_auth_url()}")

    try:
        grant = asyncio.run(flow.authorize(state=secrets.token_urlsafe(16)))
    except (TimeoutError, PermissionError, GoogleAdsClientError) as e:
        console.print(f"[red]✗ Authorization failed:[/red] {e}")
        sys.exit(EXIT_ERROR)

    if not grant.refresh_token:
        console.print("[red]✗ No refresh token was granted. Revoke the app's access and try again.[/red]")
        sys.exit(EXIT_ERROR)

    if client_ref:
        directory = DatabaseClientDirectory(open_database(config), app_credentials)
        if not directory.store_refresh_token(client_ref, grant.refresh_token):
            console.print(f"[red]Error:[/red] {ERROR_CLIENT_NOT_FOUND.format(client_ref)}")
            sys.exit(EXIT_ERROR)
        console.print(f"[green]✓ Refresh token stored for {client_ref}[/green]")
        return

    console.print("[green]✓ Authorization successful[/green]\n")
    console.print(f"Refresh token: [bold]{grant.refresh_token}[/bold]")
    console.print("[dim]Add it to the client's entry in your clients file.[/dim]")
