#!/usr/bin/env python3
"""
Focusdesk CLI.

Entry point for running the API, the notification worker, the deadline
scheduler, the Telegram bot and database migrations.
Use --service to select what to run, --action to control lifecycle.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service worker --workers 2
    python cli.py --service scheduler
    python cli.py --service migrate --migrate-action upgrade
    python cli.py --service config
"""

import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent

from focusdesk.backend.core.logging import get_logger, setup_logging

LONG_RUNNING_SERVICES = {"server", "worker", "scheduler", "telegram-poll"}

ALEMBIC_INI = PROJECT_ROOT / "focusdesk" / "backend" / "migrations" / "alembic.ini"


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def _find_process_on_port(port: int) -> list[int]:
    """Find PIDs listening on a port."""
    result = subprocess.run(
        ["lsof", "-ti", f":{port}"],
        capture_output=True, text=True,
    )
    return [int(p) for p in result.stdout.strip().split("\n") if p.strip()]


def _service_stop(logger, service: str, port: int) -> None:
    pids = _find_process_on_port(port)
    if not pids:
        click.echo(f"No {service} running on port {port}.")
        return

    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", extra={"service": service, "pid": pid, "port": port})

    click.echo(f"{service.title()} on port {port} stopped (PID: {', '.join(str(p) for p in pids)}).")


def _service_status(service: str, port: int) -> None:
    pids = _find_process_on_port(port)
    if pids:
        click.echo(f"{service.title()} is running on port {port} (PID: {', '.join(str(p) for p in pids)}).")
    else:
        click.echo(f"{service.title()} is not running on port {port}.")


def _get_service_port(port: int | None) -> int:
    if port is not None:
        return port
    from focusdesk.backend.core.config import get_app_config
    return get_app_config().application.server.port


def _run_subprocess(logger, name: str, cmd: list[str]) -> None:
    """Run a long-running child process until Ctrl+C."""
    click.echo("Press Ctrl+C to stop\n")
    try:
        subprocess.run(cmd, check=True, cwd=PROJECT_ROOT)
    except KeyboardInterrupt:
        logger.info(f"{name} stopped")
    except subprocess.CalledProcessError as e:
        logger.error(f"{name} failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "worker", "scheduler", "health", "config", "test", "info", "migrate", "telegram-poll"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "restart", "status"]),
    default="start",
    help="Lifecycle action for long-running services (server, worker, scheduler, telegram-poll).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run.",
)
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history", "autogenerate"]),
    default="current",
    help="Migration action.",
)
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
@click.option("-m", "--message", default=None, help="Migration message (for autogenerate).")
@click.option("--workers", default=1, type=int, help="Number of worker processes.")
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    migrate_action: str,
    revision: str,
    message: str | None,
    workers: int,
) -> None:
    """
    Focusdesk CLI.

    \b
    Examples:
        python cli.py --service server --reload --verbose
        python cli.py --service server --action status
        python cli.py --service worker --verbose
        python cli.py --service scheduler
        python cli.py --service telegram-poll
        python cli.py --service migrate --migrate-action upgrade
        python cli.py --service migrate --migrate-action autogenerate -m "add budget column"
        python cli.py --service test --test-type unit
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "action": action, "log_level": log_level})

    if service in LONG_RUNNING_SERVICES and action != "start":
        service_port = _get_service_port(port)

        if action == "stop":
            _service_stop(logger, service, service_port)
            return
        elif action == "status":
            _service_status(service, service_port)
            return
        elif action == "restart":
            _service_stop(logger, service, service_port)
            time.sleep(2)

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "worker":
        run_worker(logger, workers)
    elif service == "scheduler":
        run_scheduler(logger)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    elif service == "test":
        run_tests(logger, test_type)
    elif service == "info":
        show_info(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision, message)
    elif service == "telegram-poll":
        run_telegram_poll(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI server with uvicorn."""
    from focusdesk.backend.core.config import get_app_config

    server_config = get_app_config().application.server
    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info("Starting server", extra={"host": server_host, "port": server_port, "reload": reload})

    cmd = [
        sys.executable, "-m", "uvicorn",
        "focusdesk.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]
    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    _run_subprocess(logger, "Server", cmd)


def _require_redis(logger) -> None:
    from focusdesk.backend.core.config import get_redis_url

    redis_url = get_redis_url()
    logger.debug("Redis configured", extra={"redis_url": redis_url.split("@")[-1]})


def run_worker(logger, workers: int) -> None:
    """Start the Taskiq worker that delivers notifications and runs the scans."""
    logger.info("Starting background task worker", extra={"workers": workers})
    _require_redis(logger)

    cmd = [
        sys.executable, "-m", "taskiq",
        "worker",
        "focusdesk.backend.tasks.worker:broker",
        "--workers", str(workers),
    ]

    click.echo(f"Starting Taskiq worker with {workers} worker(s)")
    _run_subprocess(logger, "Worker", cmd)


def run_scheduler(logger) -> None:
    """Start the Taskiq scheduler for the daily deadline scans."""
    logger.info("Starting task scheduler")
    _require_redis(logger)

    from focusdesk.backend.tasks.scheduled import get_scheduled_tasks

    scheduled = get_scheduled_tasks()
    click.echo("Scheduled tasks:")
    for task_name, config in scheduled.items():
        click.echo(f"  - {task_name}: {config['schedule'][0]['cron']}")
    if not scheduled:
        click.echo("  (none enabled in notifications.yaml)")
    click.echo()

    cmd = [
        sys.executable, "-m", "taskiq",
        "scheduler",
        "focusdesk.backend.tasks.worker:scheduler",
    ]

    click.echo("Starting Taskiq scheduler")
    click.echo("WARNING: Run only ONE scheduler instance to avoid duplicate reminders")
    _run_subprocess(logger, "Scheduler", cmd)


def run_telegram_poll(logger) -> None:
    """Start the Telegram bot in polling mode for local development."""
    import asyncio

    from focusdesk.backend.core.config import get_app_config

    if not get_app_config().features.channel_telegram_enabled:
        click.echo(
            click.style(
                "Error: channel_telegram_enabled is false in features.yaml. "
                "Enable it to use the Telegram bot.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    logger.info("Starting Telegram bot in polling mode")

    try:
        from focusdesk.telegram.bot import create_bot, create_dispatcher

        bot = create_bot()
        dp = create_dispatcher()
    except RuntimeError as e:
        logger.error("Telegram bot failed to start", extra={"error": str(e)})
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo("Starting Telegram bot (polling mode)")
    click.echo("Send /start to your bot on Telegram")
    click.echo("Press Ctrl+C to stop\n")

    try:
        asyncio.run(_run_polling(bot, dp, logger))
    except KeyboardInterrupt:
        logger.info("Telegram bot stopped")


async def _run_polling(bot, dp, logger) -> None:
    try:
        from focusdesk.telegram.bot import publish_commands

        await bot.delete_webhook(drop_pending_updates=True)
        await publish_commands(bot)
        logger.info("Webhook deleted, starting polling")
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def check_health(logger) -> None:
    """Check that configuration loads and the application assembles."""
    click.echo("Checking application health...\n")

    checks = []

    try:
        from focusdesk.backend.core.config import get_app_config

        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    try:
        from focusdesk.backend.core.config import get_settings

        settings = get_settings()
        missing = [
            name
            for name, value in (
                ("TELEGRAM_BOT_TOKEN", settings.telegram_bot_token),
                ("OPENAI_API_KEY", settings.openai_api_key),
            )
            if not value
        ]
        detail = f"missing: {', '.join(missing)}" if missing else None
        checks.append(("Secrets (config/.env)", not missing, detail))
    except Exception as e:
        checks.append(("Secrets (config/.env)", False, str(e)))
        logger.error("Settings failed", extra={"error": str(e)})

    try:
        from focusdesk.backend.main import get_app

        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    try:
        from focusdesk.backend.models.base import Base

        import focusdesk.backend.models  # noqa: F401
        checks.append(("Database models", True, f"{len(Base.metadata.tables)} tables"))
    except Exception as e:
        checks.append(("Database models", False, str(e)))
        logger.error("Database models failed", extra={"error": str(e)})

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        all_passed = all_passed and passed

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))


def _echo_section(title: str, values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section(title, value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger) -> None:
    """Display loaded configuration."""
    from focusdesk.backend.core.config import get_app_config

    click.echo("Application Configuration:\n")
    app_config = get_app_config()

    for title, section in (
        ("Application", app_config.application),
        ("Database", app_config.database),
        ("Logging", app_config.logging),
        ("Feature Flags", app_config.features),
        ("Assistant", app_config.assistant),
        ("Notifications", app_config.notifications),
    ):
        click.echo(f"{title} (from YAML):")
        click.echo("-" * 40)
        _echo_section(title, section.model_dump())
        click.echo()

    logger.info("Configuration displayed successfully")


def run_tests(logger, test_type: str) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type})

    cmd = [sys.executable, "-m", "pytest"]
    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")
    cmd.append("-v")

    click.echo(f"Running: {' '.join(cmd)}\n")
    result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    sys.exit(result.returncode)


def run_migrations(
    logger,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """Run database migrations using Alembic."""
    logger.info("Running migrations", extra={"action": migrate_action, "revision": revision})

    cmd = [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI)]

    if migrate_action == "upgrade":
        cmd.extend(["upgrade", revision])
        click.echo(f"Upgrading database to revision: {revision}")
    elif migrate_action == "downgrade":
        cmd.extend(["downgrade", revision])
        click.echo(f"Downgrading database to revision: {revision}")
    elif migrate_action == "current":
        cmd.append("current")
        click.echo("Showing current database revision...")
    elif migrate_action == "history":
        cmd.extend(["history", "--verbose"])
        click.echo("Showing migration history...")
    elif migrate_action == "autogenerate":
        if not message:
            click.echo(
                click.style("Error: --message/-m required for autogenerate.", fg="red"),
                err=True,
            )
            sys.exit(1)
        cmd.extend(["revision", "--autogenerate", "-m", message])
        click.echo(f"Generating migration: {message}")

    click.echo()

    result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)
    logger.info("Migration completed successfully")


def show_info(logger) -> None:
    """Display application information."""
    from focusdesk.backend.core.config import get_app_config

    app_settings = get_app_config().application
    click.echo(f"{app_settings.name} {app_settings.version}")
    click.echo("=" * 40)
    click.echo(app_settings.description)
    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         FastAPI server (API and Mini App)")
    click.echo("  worker         Notification worker")
    click.echo("  scheduler      Deadline reminder scheduler (one instance)")
    click.echo("  telegram-poll  Telegram bot (polling, local dev)")
    click.echo("  health         Check application health")
    click.echo("  config         Display configuration")
    click.echo("  test           Run test suite")
    click.echo("  migrate        Database migrations")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Lifecycle actions (--action, for long-running services):")
    click.echo("  start | stop | restart | status")
    click.echo()
    click.echo("Terminal client: python -m focusdesk.cli --help")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
