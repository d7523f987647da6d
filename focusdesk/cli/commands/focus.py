"""
Focus Commands.
"""

import typer
from rich.table import Table

from focusdesk.cli.client import get_client
from focusdesk.cli.commands.common import console, run_async, short_date

app = typer.Typer(help="Focuses (business projects)")


@app.command("list")
def list_focuses() -> None:
    """
    List focuses you are a member of.

    Examples:
        python -m focusdesk.cli focus list
    """
    focuses = run_async(get_client().list_focuses())

    table = Table(title="Focuses", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Role")
    table.add_column("Status")
    table.add_column("Tasks", justify="right")
    table.add_column("Members", justify="right")

    for focus in focuses:
        table.add_row(
            focus["id"],
            focus["title"],
            focus["role"],
            focus["status"],
            str(focus["task_count"]),
            str(focus["member_count"]),
        )
    console.print(table)


@app.command()
def create(
    title: str = typer.Argument(..., help="Focus title"),
    description: str | None = typer.Option(None, "--description", "-d"),
    stage: str | None = typer.Option(None, "--stage"),
) -> None:
    """
    Create a focus. You become its owner.

    Examples:
        python -m focusdesk.cli focus create "Coffee shop launch" -d "Downtown kiosk"
    """
    fields = {k: v for k, v in {"description": description, "stage": stage}.items() if v is not None}
    focus = run_async(get_client().create_focus(title, **fields))
    console.print(f"[green]✓ Created focus[/green] {focus['title']} [dim]({focus['id']})[/dim]")


@app.command()
def show(focus_id: str = typer.Argument(..., help="Focus id")) -> None:
    """Show a focus with its members."""
    focus = run_async(get_client().get_focus(focus_id))

    console.print(f"[bold cyan]{focus['title']}[/bold cyan] [dim]({focus['status']}, you: {focus['role']})[/dim]")
    if focus.get("description"):
        console.print(focus["description"])
    console.print(f"Stage: {focus.get('stage') or '-'}   Deadline: {short_date(focus.get('deadline_at'))}")
    console.print(f"Tasks: {focus['task_count']}\n")

    table = Table(title="Members", show_header=True)
    table.add_column("User ID", style="dim")
    table.add_column("Name")
    table.add_column("Role")
    for member in focus["members"]:
        user = member["user"]
        name = user.get("username") or user.get("first_name") or str(user["tg_id"])
        table.add_row(member["user_id"], name, member["role"])
    console.print(table)
