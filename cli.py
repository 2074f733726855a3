#!/usr/bin/env python3
"""
notesync CLI.

Primary entry point for running the note store service and the terminal
client. Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service server --action stop
    python cli.py --service tui
    python cli.py --service tui --local
    python cli.py --service health
    python cli.py --service config
"""

import os
import signal
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notesync.backend.core.logging import get_logger, setup_logging


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
    return [int(p) for p in result.stdout.split() if p.strip()]


def _get_service_port(port: int | None) -> int:
    if port is not None:
        return port
    from notesync.backend.core.config import get_app_config
    return get_app_config().application.server.port


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "tui", "health", "config", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "status"]),
    default="start",
    help="Lifecycle action for the server.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option("--local", is_flag=True, help="Keep notes in memory instead of the note store (tui only).")
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    local: bool,
) -> None:
    """
    notesync CLI.

    \b
    Examples:
        python cli.py --service server --verbose
        python cli.py --service server --action status
        python cli.py --service tui
        python cli.py --service tui --local
        python cli.py --service health --debug
        python cli.py --service config
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    if service == "tui":
        run_tui(local, debug)
        return

    setup_logging(level=log_level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", service=service, action=action, log_level=log_level)

    if service == "server" and action != "start":
        server_status(logger, action, _get_service_port(port))
    elif service == "server":
        run_server(logger, host, port, reload)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    else:
        show_info(logger)


def server_status(logger, action: str, port: int) -> None:
    """Report on or stop a server listening on ``port``."""
    pids = _find_process_on_port(port)
    if not pids:
        click.echo(f"Server is not running on port {port}.")
        return

    pid_list = ", ".join(str(p) for p in pids)
    if action == "status":
        click.echo(f"Server is running on port {port} (PID: {pid_list}).")
        return

    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", pid=pid, port=port)
    click.echo(f"Server on port {port} stopped (PID: {pid_list}).")


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the note store service with uvicorn."""
    from notesync.backend.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except Exception as e:
        logger.error("Failed to load configuration", error=str(e))
        click.echo(
            click.style("Error: Could not load config/settings/application.yaml.", fg="red"),
            err=True,
        )
        sys.exit(1)

    server_host = host or server_config.host
    server_port = port or server_config.port
    logger.info("Starting server", host=server_host, port=server_port, reload=reload)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "notesync.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]
    if reload:
        cmd.append("--reload")

    click.echo(f"Starting note store at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", exit_code=e.returncode)
        sys.exit(e.returncode)


def run_tui(local: bool, debug: bool) -> None:
    """Start the terminal note client."""
    from tui import main as tui_main

    tui_main(local=local, debug=debug)


def check_health(logger) -> None:
    """Check configuration and, if it answers, the running note store."""
    import asyncio

    click.echo("Checking application health...\n")
    checks = []

    try:
        from notesync.backend.core.config import get_app_config, get_server_base_url

        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", error=str(e))
        _print_checks(checks)
        return

    try:
        from notesync.backend.core.security import check_secret_strength

        check_secret_strength()
        checks.append(("Secrets (config/.env)", True, None))
    except Exception as e:
        checks.append(("Secrets (config/.env)", False, str(e)))
        logger.error("Secrets check failed", error=str(e))

    try:
        from notesync.backend.main import get_app

        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", error=str(e))

    base_url, _ = get_server_base_url()
    try:
        status = asyncio.run(_ping_server())
        checks.append(("Note store service", status == 200, f"{base_url} -> HTTP {status}"))
    except Exception as e:
        checks.append(("Note store service", False, f"{base_url} unreachable ({e})"))
        logger.warning("Note store unreachable", base_url=base_url, error=str(e))

    _print_checks(checks)


async def _ping_server() -> int:
    from notesync.client.remote import APIClient

    client = APIClient(frontend="cli")
    try:
        response = await client.get("/health")
        return response.status_code
    finally:
        await client.close()


def _print_checks(checks: list[tuple[str, bool, str | None]]) -> None:
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


def show_config(logger) -> None:
    """Display loaded configuration."""
    try:
        from notesync.backend.core.config import get_app_config

        app_config = get_app_config()
    except Exception as e:
        logger.error("Failed to load configuration", error=str(e))
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    sections = {
        "Application": app_config.application,
        "Database": app_config.database,
        "Logging": app_config.logging,
        "Security": app_config.security,
        "Events": app_config.events,
        "Client": app_config.client,
    }
    for title, section in sections.items():
        click.echo(f"\n{title} Settings (from YAML):")
        click.echo("-" * 40)
        _echo_mapping(section.model_dump(), indent=2)

    logger.info("Configuration displayed successfully")


def _echo_mapping(values: dict, indent: int) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_mapping(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_info(logger) -> None:
    """Display application information."""
    click.echo("notesync")
    click.echo("=" * 40)

    try:
        from notesync.backend.core.config import get_app_config

        app_config = get_app_config()
        click.echo(f"Name: {app_config.application.name}")
        click.echo(f"Version: {app_config.application.version}")
        click.echo(f"Description: {app_config.application.description}")
    except Exception as e:
        logger.error("Failed to load application configuration", error=str(e))
        click.echo(click.style("Error: Could not load application.yaml configuration.", fg="red"), err=True)
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  server   Note store service (FastAPI)")
    click.echo("  tui      Terminal note client (--local for in-memory notes)")
    click.echo("  health   Check configuration and the running service")
    click.echo("  config   Display configuration")
    click.echo("  info     Show this information")
    click.echo()
    click.echo("Server actions (--action): start (default), stop, status")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
