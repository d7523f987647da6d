"""
Assistant Commands.
"""

import typer
from rich.panel import Panel

from focusdesk.cli.client import FocusdeskClient, get_client
from focusdesk.cli.commands.common import console, run_async

app = typer.Typer(help="Business assistant chat")


def _print_suggestions(message: dict) -> None:
    meta = message.get("meta") or {}
    for task in meta.get("suggested_tasks") or []:
        priority = task.get("priority", "medium")
        console.print(f"  • {task['title']} [dim]({priority})[/dim]")
    for question in meta.get("followup_questions") or []:
        console.print(f"  ? {question}")


@app.command()
def thread(focus_id: str = typer.Argument(..., help="Focus id")) -> None:
    """Show the assistant conversation of a focus."""
    data = run_async(get_client().get_thread(focus_id))

    if not data["messages"]:
        console.print("[dim]No messages yet.[/dim]")
        return

    for message in data["messages"]:
        style = "cyan" if message["role"] == "user" else "green"
        console.print(Panel(message["content"], title=message["role"], border_style=style))


@app.command()
def say(
    focus_id: str = typer.Argument(..., help="Focus id"),
    content: str = typer.Argument(..., help="Message to the assistant"),
) -> None:
    """
    Ask the assistant something about the focus.

    Examples:
        python -m focusdesk.cli assistant say <focus_id> "Plan the first week"
    """
    reply = run_async(get_client().send_message(focus_id, content))

    console.print(Panel(reply["content"], title="assistant", border_style="green"))
    _print_suggestions(reply)


async def _apply(client: FocusdeskClient, focus_id: str) -> list[dict] | None:
    data = await client.get_thread(focus_id)
    replies = [m for m in data["messages"] if m["role"] == "assistant"]
    if not replies:
        return None

    suggested = (replies[-1].get("meta") or {}).get("suggested_tasks") or []
    if not suggested:
        return []

    tasks = [
        {
            "title": task["title"],
            "description": task.get("description"),
            "priority": task.get("priority", "medium"),
            "due_at": task.get("due_at"),
        }
        for task in suggested
    ]
    return await client.plan_to_tasks(focus_id, tasks)


@app.command()
def apply(focus_id: str = typer.Argument(..., help="Focus id")) -> None:
    """Create the tasks suggested in the assistant's last reply (owner only)."""
    created = run_async(_apply(get_client(), focus_id))

    if not created:
        console.print("[yellow]The last assistant reply has no suggested tasks.[/yellow]")
        return

    console.print(f"[green]✓ Created {len(created)} task(s)[/green]")
    for task in created:
        console.print(f"  • {task['title']} [dim]({task['id']})[/dim]")
