"""
Terminal client entry point.

Usage:
    python -m focusdesk.cli --help
    python -m focusdesk.cli --dev-tg-id 1001 focus list
    FOCUSDESK_DEV_TG_ID=1001 python -m focusdesk.cli task list <focus_id> --all
"""

import typer

from focusdesk.backend.core.logging import setup_logging
from focusdesk.cli.client import configure_client
from focusdesk.cli.commands import assistant_app, focus_app, health_app, invite_app, task_app

app = typer.Typer(
    name="focusdesk",
    help="Focusdesk terminal client.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(focus_app, name="focus")
app.add_typer(task_app, name="task")
app.add_typer(assistant_app, name="assistant")
app.add_typer(invite_app, name="invite")
app.add_typer(health_app, name="health")


@app.callback()
def main(
    base_url: str | None = typer.Option(None, "--base-url", envvar="FOCUSDESK_BASE_URL", help="Backend URL"),
    dev_tg_id: int | None = typer.Option(
        None, "--dev-tg-id", envvar="FOCUSDESK_DEV_TG_ID", help="Telegram id for dev login"
    ),
    init_data: str | None = typer.Option(
        None, "--init-data", envvar="FOCUSDESK_INIT_DATA", help="Signed Telegram init data"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Focusdesk terminal client."""
    level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=level, format_type="console", enable_file_logging=False)
    configure_client(base_url=base_url, dev_tg_id=dev_tg_id, init_data=init_data)


if __name__ == "__main__":
    app()
