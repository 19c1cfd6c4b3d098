"""Run a monitoring pass over all active clients."""

import asyncio
import sys
from typing import List, Optional

import click
from rich.console import Console

from ...alerts.engine import DatabaseAlertEngine
from ...checks.register_checks import create_default_registry
from ...directory.database import DatabaseClientDirectory
from ...exceptions import MonitorConfigurationError, UnknownCheckError
from ...services.monitor import GoogleAdsMonitor
from ..cli_constants import (
    DEFAULT_CONCURRENCY,
    ERROR_UNKNOWN_CHECKS,
    EXIT_ERROR,
    EXIT_SUCCESS,
    INFO_DRY_RUN,
)
from ..formatters.results import format_run_summary
from ..utils.config import get_app_credentials, get_config
from ..utils.database import open_database
from ..utils.log_setup import setup_logging

console = Console()


def parse_check_ids(checks: Optional[str]) -> Optional[List[str]]:
    """Split a comma separated list of check ids."""
    if not checks:
        return None
    ids = [check_id.strip() for check_id in checks.split(",") if check_id.strip()]
    return ids or None


@click.command("run")
@click.option(
    "--dry-run",
    "--dry",
    "dry_run",
    is_flag=True,
    help="Run all checks without creating or resolving alerts",
)
@click.option(
    "--checks",
    help="Comma separated check ids to run (default: all)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_CONCURRENCY,
    show_default=True,
    help="Number of clients processed at the same time",
)
def run(dry_run: bool, checks: Optional[str], debug: bool, concurrency: int) -> None:
    """Run the monitoring checks for every connected client.

    Exits with status 1 when any client could not be processed.

    Example:
        ads-monitor run --dry-run --checks no_delivery,cpc_spike
    """
    setup_logging(debug)

    registry = create_default_registry()
    check_ids = parse_check_ids(checks)
    try:
        registry.select(check_ids)
    except UnknownCheckError as e:
        console.print(f"[red]Error:[/red] {ERROR_UNKNOWN_CHECKS.format(', '.join(e.check_ids))}")
        console.print("\nRun 'ads-monitor list-checks' to see available checks")
        sys.exit(EXIT_ERROR)

    config = get_config()
    try:
        app_credentials = get_app_credentials(config)
    except MonitorConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_ERROR)

    if dry_run:
        console.print(f"[yellow]{INFO_DRY_RUN}[/yellow]")

    connection = open_database(config)
    try:
        monitor = GoogleAdsMonitor(
            directory=DatabaseClientDirectory(connection, app_credentials),
            alert_engine=DatabaseAlertEngine(connection),
            registry=registry,
            max_concurrency=concurrency,
        )
        result = asyncio.run(monitor.run(dry_run=dry_run, check_ids=check_ids))
    finally:
        connection.close()

    format_run_summary(result, console)
    sys.exit(EXIT_SUCCESS if result.success else EXIT_ERROR)
