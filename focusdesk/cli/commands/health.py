"""
Health Check Commands.

Commands for checking backend health and status.
"""

import typer
from rich.panel import Panel
from rich.table import Table

from focusdesk.cli.client import get_client
from focusdesk.cli.commands.common import console, run_async

app = typer.Typer(help="Backend health")


async def _fetch(path: str) -> tuple[int, dict]:
    response = await get_client().request("GET", path)
    return response.status_code, response.json()


@app.command()
def status(
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Show detailed status"),
) -> None:
    """
    Check backend health status (requires running server).

    Examples:
        python -m focusdesk.cli health status -d
    """
    status_code, data = run_async(_fetch("/health/detailed" if detailed else "/health/ready"))
    _display_health(data, detailed)
    if status_code != 200:
        raise typer.Exit(1)


def _display_health(data: dict, detailed: bool) -> None:
    status = data.get("status", "unknown")
    status_color = "green" if status == "healthy" else "red" if status == "unhealthy" else "yellow"

    if detailed and "checks" in data:
        table = Table(title="Health Status", show_header=True)
        table.add_column("Component", style="cyan")
        table.add_column("Status")
        table.add_column("Details")

        for component, check_data in data["checks"].items():
            check_status = check_data.get("status", "unknown")
            color = "green" if check_status == "healthy" else "red"

            details = []
            if "latency_ms" in check_data:
                details.append(f"latency: {check_data['latency_ms']}ms")
            if "error" in check_data:
                details.append(f"error: {check_data['error']}")

            table.add_row(component, f"[{color}]{check_status}[/{color}]", ", ".join(details) or "-")

        console.print(table)

        if "application" in data:
            app_info = data["application"]
            console.print(f"\n[dim]Application: {app_info.get('name')} v{app_info.get('version')}[/dim]")
            console.print(f"[dim]Environment: {app_info.get('env')}[/dim]")
    else:
        console.print(Panel(f"[{status_color}]{status.upper()}[/{status_color}]", title="Backend Status"))


@app.command()
def ping() -> None:
    """Simple ping to check if backend is reachable."""
    status_code, _ = run_async(_fetch("/health"))

    if status_code == 200:
        console.print("[green]✓ Backend is reachable[/green]")
    else:
        console.print(f"[yellow]Backend responded with status {status_code}[/yellow]")
