"""Configure Google Ads API credentials and the database."""

from typing import Dict

import click
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from ..cli_constants import GOOGLE_ADS_ENV_MAPPING, SUCCESS_CONFIG_CLEARED, SUCCESS_CONFIG_SAVED
from ..utils.config import clear_config, get_config_file, is_sensitive, load_config, save_config

console = Console()

PROMPTS = {
    "developer_token": "Google Ads developer token",
    "client_id": "OAuth client ID",
    "client_secret": "OAuth client secret",
    "login_customer_id": "Manager (login) customer ID (optional)",
}


def mask(value: str) -> str:
    """Hide all but the last four characters of a secret."""
    if len(value) <= 4:
        return "****"
    return f"{'*' * 8}{value[-4:]}"


def show_configuration(config: Dict[str, Dict[str, str]]) -> None:
    """Display the stored configuration with secrets masked."""
    table = Table(title=f"Configuration ({get_config_file()})")
    table.add_column("Section", style="cyan")
    table.add_column("Key", style="white")
    table.add_column("Value", style="green")
    table.add_column("Env override", style="dim")

    for section, values in config.items():
        for key, value in values.items():
            display = mask(str(value)) if is_sensitive(key) and value else str(value)
            env_key = GOOGLE_ADS_ENV_MAPPING.get(key, "") if section == "google_ads" else ""
            table.add_row(section, key, display, env_key)

    console.print(table)


@click.command()
@click.option("--show", is_flag=True, help="Show current configuration")
@click.option("--clear", is_flag=True, help="Remove the stored configuration")
def configure(show: bool, clear: bool) -> None:
    """Configure Google Ads API credentials.

    Values are stored in ~/.ads-monitor/config.json with secrets encrypted.
    Environment variables (or a .env file) take precedence at run time.
    """
    config = load_config() or {}

    if show:
        if not config:
            console.print("[yellow]No configuration stored[/yellow]")
            return
        show_configuration(config)
        return

    if clear:
        if Confirm.ask("Remove the stored configuration?"):
            clear_config()
            console.print(f"[green]{SUCCESS_CONFIG_CLEARED}[/green]")
        return

    console.print("\n[bold]Configuring Google Ads API access[/bold]\n")

    google_ads = config.get("google_ads", {})
    for key, prompt in PROMPTS.items():
        current = google_ads.get(key, "")
        value = Prompt.ask(
            prompt,
            default=current or "",
            password=is_sensitive(key),
            show_default=not is_sensitive(key),
        )
        if value:
            google_ads[key] = value.strip()
        else:
            google_ads.pop(key, None)
    config["google_ads"] = google_ads

    database = config.get("database", {})
    url = Prompt.ask(
        "Database URL (leave empty for the local sqlite file)",
        default=database.get("url", ""),
    )
    if url:
        database["url"] = url.strip()
    else:
        database.pop("url", None)
    config["database"] = database

    save_config(config)
    console.print(f"\n[green]✓ {SUCCESS_CONFIG_SAVED}[/green]")
