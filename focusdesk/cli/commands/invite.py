"""
Invite Commands.
"""

import typer

from focusdesk.cli.client import get_client
from focusdesk.cli.commands.common import console, run_async, short_date

app = typer.Typer(help="Invites to a focus")


@app.command()
def create(
    focus_id: str = typer.Argument(..., help="Focus id"),
    hours: int | None = typer.Option(None, "--hours", help="Expire after this many hours"),
    max_uses: int | None = typer.Option(None, "--max-uses", help="How many people may join"),
) -> None:
    """Create an invite code (owner only)."""
    options = {k: v for k, v in {"expires_in_hours": hours, "max_uses": max_uses}.items() if v is not None}
    invite = run_async(get_client().create_invite(focus_id, **options))

    console.print(f"[green]✓ Invite code:[/green] [bold]{invite['code']}[/bold]")
    console.print(f"[dim]Expires {short_date(invite.get('expires_at'))}, max uses {invite.get('max_uses')}[/dim]")


@app.command()
def accept(code: str = typer.Argument(..., help="Invite code")) -> None:
    """Join a focus with an invite code."""
    member = run_async(get_client().accept_invite(code))
    console.print(f"[green]✓ Joined focus {member['focus_id']} as {member['role']}[/green]")
