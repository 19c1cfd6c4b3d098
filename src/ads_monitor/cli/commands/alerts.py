"""Inspect and triage alerts."""

import sys
from typing import Optional

import click
from rich.console import Console

from ...alerts.engine import DatabaseAlertEngine
from ...models.base import AlertStatus, Platform
from ..cli_constants import ERROR_ALERT_NOT_FOUND, EXIT_ERROR
from ..formatters.results import format_alert_summary, format_alerts_table
from ..utils.config import get_config
from ..utils.database import open_database

console = Console()


def _engine() -> DatabaseAlertEngine:
    return DatabaseAlertEngine(open_database(get_config()))


@click.group()
def alerts() -> None:
    """Inspect and triage alerts."""


@alerts.command("list")
@click.option("--client", "client_id", help="Only show alerts for this client id")
def list_alerts(client_id: Optional[str]) -> None:
    """List open alerts, newest first."""
    engine = _engine()
    format_alerts_table(engine.get_open_alerts(tenant_id=client_id, platform=Platform.GOOGLE_ADS), console)


@alerts.command("summary")
@click.option("--client", "client_id", help="Only summarize alerts for this client id")
def summary(client_id: Optional[str]) -> None:
    """Summarize open high and critical alerts."""
    engine = _engine()
    format_alert_summary(engine.get_alert_summary(tenant_id=client_id), console)


def _set_status(alert_id: str, status: AlertStatus) -> None:
    engine = _engine()
    if not engine.update_alert_status(alert_id, status):
        console.print(f"[red]Error:[/red] {ERROR_ALERT_NOT_FOUND.format(alert_id)}")
        sys.exit(EXIT_ERROR)
    console.print(f"[green]✓[/green] Alert {alert_id} marked {status.value}")


@alerts.command("resolve")
@click.argument("alert_id")
def resolve(alert_id: str) -> None:
    """Mark an alert resolved."""
    _set_status(alert_id, AlertStatus.RESOLVED)


@alerts.command("acknowledge")
@click.argument("alert_id")
def acknowledge(alert_id: str) -> None:
    """Mark an alert acknowledged."""
    _set_status(alert_id, AlertStatus.ACKNOWLEDGED)


@alerts.command("ignore")
@click.argument("alert_id")
def ignore(alert_id: str) -> None:
    """Mark an alert ignored."""
    _set_status(alert_id, AlertStatus.IGNORED)
