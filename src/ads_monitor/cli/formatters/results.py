"""Formatters for monitoring runs, checks, clients and alerts."""

from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...checks.base import CheckBase
from ...models.runs import RunResult

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
}

STATUS_STYLES = {
    "open": "bold",
    "acknowledged": "cyan",
    "resolved": "green",
    "ignored": "dim",
}


def get_severity_style(severity: str) -> str:
    """Get rich style for severity level."""
    return SEVERITY_STYLES.get(severity, "white")


def format_run_summary(result: RunResult, console: Console) -> None:
    """Display per-client counters followed by run totals."""
    if result.tenants:
        table = Table(title="Clients")
        table.add_column("Client", style="cyan")
        table.add_column("Checks", justify="right")
        table.add_column("Alerts created", justify="right", style="yellow")
        table.add_column("Skipped", justify="right", style="dim")
        table.add_column("Status")

        for tenant in result.tenants:
            status = "[green]OK[/green]" if tenant.processed else f"[red]{tenant.error}[/red]"
            table.add_row(
                tenant.tenant_name,
                str(tenant.checks_run),
                str(tenant.alerts_created),
                str(tenant.alerts_skipped),
                status,
            )

        console.print(table)

    lines = [
        f"Clients processed: [bold]{result.tenants_processed}[/bold]",
        f"Checks run:        [bold]{result.checks_run}[/bold]",
        f"Alerts created:    [bold]{result.alerts_created}[/bold]",
        f"Alerts skipped:    [bold]{result.alerts_skipped}[/bold]",
        f"Errors:            [bold]{len(result.errors)}[/bold]",
    ]
    if result.duration_seconds is not None:
        lines.append(f"Duration:          {result.duration_seconds:.1f}s")

    title = "Monitoring Run (dry run)" if result.dry_run else "Monitoring Run"
    console.print(Panel(
        "\n".join(lines),
        title=title,
        border_style="green" if result.success else "red",
    ))

    for error in result.errors:
        console.print(f"  [red]•[/red] {error}")


def format_checks_table(checks: List[CheckBase], console: Console) -> None:
    """Display checks in run order."""
    table = Table(title="Available Monitoring Checks")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Check ID", style="cyan", no_wrap=True)
    table.add_column("Category", style="magenta")
    table.add_column("Name", style="white")
    table.add_column("Description", style="white")

    for position, check in enumerate(checks, 1):
        table.add_row(str(position), check.id, check.category.value, check.name, check.description)

    console.print(table)


def format_clients_table(clients: List[Dict[str, Any]], console: Console) -> None:
    """Display stored clients without secrets."""
    table = Table(title="Clients")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Customer ID")
    table.add_column("Status")
    table.add_column("Monitoring")
    table.add_column("Refresh token")
    table.add_column("Last checked", style="dim")

    for client in clients:
        last_checked = client.get("last_checked_at")
        table.add_row(
            client["id"],
            client["name"],
            client.get("customer_id") or "-",
            client.get("status") or "-",
            "[green]on[/green]" if client.get("monitoring_enabled") else "[dim]off[/dim]",
            "yes" if client.get("has_refresh_token") else "[red]no[/red]",
            last_checked.strftime("%Y-%m-%d %H:%M") if last_checked else "never",
        )

    console.print(table)


def format_alerts_table(alerts: List[Dict[str, Any]], console: Console) -> None:
    """Display alerts, most recent first."""
    if not alerts:
        console.print("[green]No open alerts.[/green]")
        return

    table = Table(title=f"Open Alerts ({len(alerts)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Client", style="cyan")
    table.add_column("Check", style="magenta")
    table.add_column("Title", style="white")
    table.add_column("Status")
    table.add_column("Detected", style="dim")

    for alert in alerts:
        severity = alert["severity"]
        status = alert["status"]
        table.add_row(
            alert["id"],
            f"[{get_severity_style(severity)}]{severity.upper()}[/]",
            str(alert.get("details", {}).get("client_name", alert.get("client_id"))),
            alert["check_id"],
            alert["title"],
            f"[{STATUS_STYLES.get(status, 'white')}]{status}[/]",
            (alert.get("detected_at") or "")[:16].replace("T", " "),
        )

    console.print(table)


def format_alert_summary(summary: Dict[str, Any], console: Console) -> None:
    """Display open high and critical alerts per platform."""
    total = summary.get("total_critical", 0)
    if not total:
        console.print("[green]No open high or critical alerts.[/green]")
        return

    console.print(f"\n[bold]{total} open high/critical alert(s)[/bold]\n")

    for platform, group in summary.get("by_platform", {}).items():
        lines = []
        for item in group["items"]:
            style = get_severity_style(item["severity"])
            lines.append(f"[{style}]{item['severity'].upper()}[/] {item['title']}")
            if item.get("short_description"):
                lines.append(f"  [dim]{item['short_description']}[/dim]")
        remaining = group["count"] - len(group["items"])
        if remaining > 0:
            lines.append(f"[dim]... and {remaining} more[/dim]")

        console.print(Panel("\n".join(lines), title=f"{platform} ({group['count']})"))
