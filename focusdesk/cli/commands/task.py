"""
Task Commands.
"""

import typer
from rich.table import Table

from focusdesk.cli.client import FocusdeskClient, ToggleResult, get_client
from focusdesk.cli.commands.common import console, run_async, short_date

app = typer.Typer(help="Tasks of a focus")


@app.command("list")
def list_tasks(
    focus_id: str = typer.Argument(..., help="Focus id"),
    all_tasks: bool = typer.Option(False, "--all", "-a", help="Include tasks assigned to others"),
    status: str | None = typer.Option(None, "--status", "-s", help="todo, in_progress, done or canceled"),
) -> None:
    """
    List tasks of a focus (yours by default).

    Examples:
        python -m focusdesk.cli task list <focus_id> --all
    """
    tasks = run_async(get_client().list_tasks(focus_id, "all" if all_tasks else "me", status))

    table = Table(title="Tasks", show_header=True)
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Priority")
    table.add_column("Due")
    table.add_column("Subtasks", justify="right")

    for task in tasks:
        done_subtasks = sum(1 for sub in task["subtasks"] if sub["is_done"])
        table.add_row(
            "✓" if task["status"] == "done" else "",
            task["id"],
            task["title"],
            task["priority"],
            short_date(task.get("due_at")),
            f"{done_subtasks}/{len(task['subtasks'])}" if task["subtasks"] else "-",
        )
    console.print(table)


@app.command()
def add(
    focus_id: str = typer.Argument(..., help="Focus id"),
    title: str = typer.Argument(..., help="Task title"),
    priority: str = typer.Option("medium", "--priority", "-p", help="low, medium, high or urgent"),
    due: str | None = typer.Option(None, "--due", help="Due date (ISO 8601)"),
    assignee: str | None = typer.Option(None, "--assignee", help="User id of a member"),
) -> None:
    """Add a task to a focus (owner only)."""
    fields = {"priority": priority}
    if due:
        fields["due_at"] = due
    if assignee:
        fields["assigned_to_user_id"] = assignee

    task = run_async(get_client().create_task(focus_id, title, **fields))
    console.print(f"[green]✓ Added task[/green] {task['title']} [dim]({task['id']})[/dim]")


async def _toggle(client: FocusdeskClient, focus_id: str, task_id: str) -> ToggleResult | None:
    tasks = await client.list_tasks(focus_id, "all")
    task = next((t for t in tasks if t["id"] == task_id), None)
    if task is None:
        return None
    return await client.toggle_task(task)


@app.command()
def toggle(
    task_id: str = typer.Argument(..., help="Task id"),
    focus_id: str = typer.Option(..., "--focus", "-f", help="Focus the task belongs to"),
) -> None:
    """
    Mark a task done, or reopen a done task.

    Examples:
        python -m focusdesk.cli task toggle <task_id> --focus <focus_id>
    """
    result = run_async(_toggle(get_client(), focus_id, task_id))

    if result is None:
        console.print(f"[red]Task {task_id} not found in focus {focus_id}[/red]")
        raise typer.Exit(1)

    if result.rolled_back:
        console.print(
            f"[yellow]Rolled back to '{result.task['status']}': "
            f"{result.error.code} {result.error.message}[/yellow]"
        )
        raise typer.Exit(1)

    console.print(f"[green]✓ {result.task['title']} → {result.task['status']}[/green]")
