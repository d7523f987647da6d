"""
Shared helpers for terminal client commands.
"""

import asyncio
from typing import Any, Awaitable

import httpx
import typer
from rich.console import Console

from focusdesk.cli.client import ApiError, close_client

console = Console()


def run_async(coro: Awaitable[Any]) -> Any:
    """
    Run a command coroutine, turning API failures into a non-zero exit.

    The shared client is closed afterwards.
    """

    async def _wrapped() -> Any:
        try:
            return await coro
        finally:
            await close_client()

    try:
        return asyncio.run(_wrapped())
    except ApiError as e:
        console.print(f"[red]Error {e.status_code} {e.code}: {e.message}[/red]")
        raise typer.Exit(1)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to backend[/red]")
        console.print("[dim]Is the server running? Start with: python cli.py --service server[/dim]")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def short_date(value: str | None) -> str:
    return value[:10] if value else "-"
