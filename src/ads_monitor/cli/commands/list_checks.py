"""List available monitoring checks."""

from typing import Optional

import click
from rich.console import Console

from ...checks.register_checks import create_default_registry
from ...models.base import CheckCategory
from ..cli_constants import CATEGORY_CHOICES, ERROR_NO_CHECKS_FOUND
from ..formatters.results import format_checks_table

console = Console()


@click.command("list-checks")
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES, case_sensitive=False),
    help="Filter checks by category",
)
def list_checks(category: Optional[str]) -> None:
    """List all available monitoring checks in the order they run."""
    registry = create_default_registry()

    if category:
        checks = registry.list_by_category(CheckCategory(category.lower()))
    else:
        checks = registry.list_all()

    if not checks:
        console.print(f"[yellow]{ERROR_NO_CHECKS_FOUND}[/yellow]")
        return

    format_checks_table(checks, console)

    console.print(f"\nTotal checks: {len(checks)}")

    if not category:
        for check_category in CheckCategory:
            count = len(registry.list_by_category(check_category))
            if count:
                console.print(f"  • {check_category.value}: {count} checks")
