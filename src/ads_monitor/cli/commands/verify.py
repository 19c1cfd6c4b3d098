"""Verify the Google Ads connection of one client."""

import asyncio
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from ...client.google_ads import CustomerInfo, GoogleAdsClient
from ...directory.database import DatabaseClientDirectory
from ...exceptions import GoogleAdsClientError, MonitorConfigurationError
from ...models.tenants import TenantConfig
from ..cli_constants import ERROR_CLIENT_NOT_FOUND, EXIT_ERROR
from ..utils.config import get_app_credentials, get_config
from ..utils.database import open_database

console = Console()


async def fetch_customer_info(tenant: TenantConfig) -> Optional[CustomerInfo]:
    """Verify the connection and return the account details, or None if it fails."""
    client = GoogleAdsClient.for_tenant(tenant)
    try:
        if not await client.verify_connection():
            return None
        return await client.get_customer_info()
    finally:
        await client.close()


@click.command()
@click.argument("client_ref", metavar="CLIENT")
def verify(client_ref: str) -> None:
    """Check that a client's Google Ads credentials work.

    CLIENT is the stored client id or its Google Ads customer id.
    """
    config = get_config()
    try:
        app_credentials = get_app_credentials(config)
    except MonitorConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_ERROR)

    directory = DatabaseClientDirectory(open_database(config), app_credentials)
    tenant = directory.get_tenant(client_ref)
    if tenant is None:
        console.print(f"[red]Error:[/red] {ERROR_CLIENT_NOT_FOUND.format(client_ref)}")
        console.print("[dim]The client must exist and have a customer id and refresh token.[/dim]")
        sys.exit(EXIT_ERROR)

    with console.status(f"Verifying Google Ads access for {tenant.tenant_name}..."):
        try:
            info = asyncio.run(fetch_customer_info(tenant))
        except GoogleAdsClientError as e:
            info = None
            console.print(f"[red]{e}[/red]")

    if info is None:
        console.print(f"[red]✗ Could not access customer {tenant.account_id}[/red]")
        sys.exit(EXIT_ERROR)

    console.print(
        Panel(
            f"[bold]Account:[/bold] {info.descriptive_name}\n"
            f"[bold]Customer ID:[/bold] {info.id}\n"
            f"[bold]Currency:[/bold] {info.currency_code}\n"
            f"[bold]Time zone:[/bold] {info.time_zone}",
            title=f"[green]✓ {tenant.tenant_name} connected[/green]",
        )
    )
