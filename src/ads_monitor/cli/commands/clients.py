"""Manage the monitored client accounts."""

import sys
from pathlib import Path
from typing import Any, Dict, List

import click
import yaml
from pydantic import ValidationError
from rich.console import Console

from ...directory.database import DatabaseClientDirectory
from ...exceptions import MonitorConfigurationError
from ..cli_constants import CLIENT_STATUS_CHOICES, EXIT_ERROR
from ..formatters.results import format_clients_table
from ..utils.config import get_app_credentials, get_config
from ..utils.database import open_database

console = Console()

CLIENT_FIELDS = {
    "id",
    "name",
    "customer_id",
    "refresh_token",
    "status",
    "monitoring_enabled",
    "thresholds",
    "time_zone",
}


def load_clients_file(path: Path) -> List[Dict[str, Any]]:
    """Read client definitions from a YAML file.

    The file holds either a list of clients or a mapping with a ``clients`` list.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("clients", [])
    if not isinstance(data, list):
        raise click.BadParameter("expected a list of clients", param_hint="FILE")

    for index, entry in enumerate(data, start=1):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise click.BadParameter(f"client #{index} has no name", param_hint="FILE")
        unknown = set(entry) - CLIENT_FIELDS
        if unknown:
            raise click.BadParameter(
                f"client '{entry['name']}' has unknown field(s): {', '.join(sorted(unknown))}",
                param_hint="FILE",
            )
        status = entry.get("status", "connected")
        if status not in CLIENT_STATUS_CHOICES:
            raise click.BadParameter(
                f"client '{entry['name']}' has invalid status '{status}'", param_hint="FILE"
            )
    return data


def _directory(config) -> DatabaseClientDirectory:
    try:
        app_credentials = get_app_credentials(config)
    except MonitorConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_ERROR)
    return DatabaseClientDirectory(open_database(config), app_credentials)


@click.group()
def clients() -> None:
    """Manage monitored Google Ads clients."""


@clients.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_clients(file: Path) -> None:
    """Create or update clients from a YAML file.

    Clients are matched by id when given, otherwise by customer id.

    Example:
        ads-monitor clients import clients.yaml
    """
    entries = load_clients_file(file)
    directory = _directory(get_config())

    imported = 0
    for entry in entries:
        try:
            client_id = directory.upsert_client(
                name=entry["name"],
                customer_id=str(entry["customer_id"]) if entry.get("customer_id") else None,
                refresh_token=entry.get("refresh_token"),
                status=entry.get("status", "connected"),
                monitoring_enabled=entry.get("monitoring_enabled", True),
                thresholds=entry.get("thresholds"),
                time_zone=entry.get("time_zone"),
                client_id=entry.get("id"),
            )
        except ValidationError as e:
            console.print(f"[red]✗[/red] {entry['name']}: invalid thresholds\n{e}")
            continue
        console.print(f"[green]✓[/green] {entry['name']} [dim]({client_id})[/dim]")
        imported += 1

    console.print(f"\nImported {imported} of {len(entries)} client(s)")
    if imported < len(entries):
        sys.exit(EXIT_ERROR)


@clients.command("list")
def list_clients() -> None:
    """List stored clients."""
    directory = _directory(get_config())
    stored = directory.list_clients()

    if not stored:
        console.print("[yellow]No clients stored. Use 'ads-monitor clients import' to add some.[/yellow]")
        return

    format_clients_table(stored, console)
