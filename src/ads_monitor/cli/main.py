"""Main CLI entry point."""

import logging
import sys

import click
from dotenv import load_dotenv
from rich.console import Console

from .cli_constants import (
    VERSION,
    EXIT_ERROR,
    EXIT_KEYBOARD_INTERRUPT,
    INFO_OPERATION_CANCELLED,
    ERROR_UNEXPECTED,
    INFO_RUN_WITH_DEBUG,
)
from .commands import alerts, authorize, clients, configure, list_checks, run, verify

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=VERSION, prog_name="ads-monitor")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Ads Monitor - anomaly alerts for Google Ads accounts.

    Runs a fixed set of checks against every connected client and
    keeps one alert per problem per day.
    """
    ctx.ensure_object(dict)


# Register commands
cli.add_command(configure.configure)
cli.add_command(run.run)
cli.add_command(list_checks.list_checks)
cli.add_command(clients.clients)
cli.add_command(alerts.alerts)
cli.add_command(verify.verify)
cli.add_command(authorize.authorize)


def main() -> None:
    """Main entry point."""
    load_dotenv()
    try:
        cli()
    except click.ClickException:
        # Click will handle its own exceptions
        raise
    except KeyboardInterrupt:
        console.print(f"\n[yellow]{INFO_OPERATION_CANCELLED}[/yellow]")
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception("Unexpected error in CLI")
        console.print(f"[red]{ERROR_UNEXPECTED.format(str(e))}[/red]")
        console.print(f"[dim]{INFO_RUN_WITH_DEBUG}[/dim]")
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
