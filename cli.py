#!/usr/bin/env python3
"""
adnotes CLI.

Primary entry point for all application operations.
Use --service to select what to run, --mode to choose how the note window opens.

Usage:
    python cli.py --help
    python cli.py
    python cli.py --mode server
    python cli.py --mode stop-server --verbose
    python cli.py --service check-index
    python cli.py --service config
"""

import asyncio
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from adnotes.backend.core.config import validate_project_root
from adnotes.backend.core.logging import get_logger, setup_logging

MODES = {
    "compose": "composing_note",
    "server": "server_starting",
    "stop-server": "confirming_server_stop",
}


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["tui", "config", "info", "check-index", "reindex", "stats"]),
    default="tui",
    help="Service or command to run.",
)
@click.option(
    "--mode", "-m",
    type=click.Choice(list(MODES)),
    default="compose",
    help="Initial mode of the note window (tui only).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
def main(service: str, mode: str, verbose: bool, debug: bool) -> None:
    """
    adnotes CLI.

    Use --service to select what to run. The default opens the note window;
    --mode server shows the server-running window and --mode stop-server
    asks before terminating the companion server process.

    \b
    Examples:
        python cli.py
        python cli.py --mode server
        python cli.py --mode stop-server
        python cli.py --service check-index --verbose
        python cli.py --service reindex
        python cli.py --service stats
        python cli.py --service config
        python cli.py --service info
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    # The note window owns the terminal; its logs go to the file only.
    setup_logging(level=log_level, format_type="console", enable_console=service != "tui")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "mode": mode, "log_level": log_level})

    if service == "tui":
        run_tui(logger, mode)
    elif service == "config":
        show_config(logger)
    elif service == "info":
        show_info(logger)
    elif service == "check-index":
        check_index(logger)
    elif service == "reindex":
        rebuild_index(logger)
    elif service == "stats":
        show_stats(logger)


async def _open_store():
    """Create the schema if needed and return a NoteStore on the shared engine."""
    from adnotes.backend.core.database import get_engine, get_session_factory, init_schema
    from adnotes.backend.services.note import NoteStore

    await init_schema(get_engine())
    return NoteStore(get_session_factory())


def run_tui(logger, mode: str) -> None:
    """Open the note window."""
    from adnotes.backend.core.config import get_app_config
    from adnotes.backend.core.database import dispose_engine
    from adnotes.session.context import SessionTimings
    from adnotes.session.keys import KeyMap
    from adnotes.session.modes import Mode
    from adnotes.tui.app import NotesApp

    try:
        app_config = get_app_config().application
        keymap = KeyMap.from_config(app_config.keys)
    except ValueError as e:
        logger.error("Invalid configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    async def _run() -> int:
        try:
            store = await _open_store()
            app = NotesApp(
                store,
                keymap=keymap,
                timings=SessionTimings.from_schema(app_config.session),
                companion_name=app_config.companion.process_name,
                initial_mode=Mode(MODES[mode]),
            )
            await app.run_async()
            return app.return_code or 0
        finally:
            await dispose_engine()

    logger.info("Starting note window", extra={"mode": mode})
    return_code = asyncio.run(_run())
    logger.info("Note window closed", extra={"return_code": return_code})
    if return_code:
        sys.exit(return_code)


def check_index(logger) -> None:
    """Verify that the full-text index matches the notes table."""
    from adnotes.backend.core.database import dispose_engine
    from adnotes.backend.core.exceptions import StorageError

    async def _check() -> int:
        try:
            store = await _open_store()
            await store.verify_index()
            return await store.count()
        finally:
            await dispose_engine()

    try:
        total = asyncio.run(_check())
    except StorageError as e:
        logger.error("Index check failed", extra={"error": e.message})
        click.echo(click.style(f"Index inconsistent: {e.message}", fg="red"), err=True)
        click.echo("Run 'python cli.py --service reindex' to rebuild it.", err=True)
        sys.exit(1)

    click.echo(click.style(f"Index consistent ({total} notes).", fg="green"))
    logger.info("Index check passed", extra={"notes": total})


def rebuild_index(logger) -> None:
    """Rebuild the full-text index from the notes table."""
    from adnotes.backend.core.database import dispose_engine
    from adnotes.backend.core.exceptions import StorageError

    async def _rebuild() -> int:
        try:
            store = await _open_store()
            return await store.rebuild_index()
        finally:
            await dispose_engine()

    try:
        rows = asyncio.run(_rebuild())
    except StorageError as e:
        logger.error("Index rebuild failed", extra={"error": e.message})
        click.echo(click.style(f"Error rebuilding index: {e.message}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Index rebuilt ({rows} notes).")


def show_stats(logger) -> None:
    """Display note counts and the database location."""
    from adnotes.backend.core.config import get_app_config, get_database_path
    from adnotes.backend.core.database import dispose_engine
    from adnotes.backend.core.exceptions import StorageError
    from adnotes.backend.core.pagination import total_pages_for

    async def _count() -> int:
        try:
            store = await _open_store()
            return await store.count()
        finally:
            await dispose_engine()

    try:
        total = asyncio.run(_count())
    except StorageError as e:
        logger.error("Failed to count notes", extra={"error": e.message})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    page_size = get_app_config().application.session.page_size
    click.echo(f"Database: {get_database_path()}")
    click.echo(f"Notes:    {total}")
    click.echo(f"Pages:    {total_pages_for(total, page_size)} (page size {page_size})")


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    try:
        from adnotes.backend.core.config import get_app_config, get_database_path

        app_config = get_app_config()

        click.echo("Application Settings (from YAML):")
        click.echo("-" * 40)
        for key, value in app_config.application.model_dump().items():
            if isinstance(value, dict):
                click.echo(f"  {key}:")
                for k, v in value.items():
                    click.echo(f"    {k}: {v}")
            else:
                click.echo(f"  {key}: {value}")

        click.echo("\nDatabase Settings (from YAML):")
        click.echo("-" * 40)
        for key, value in app_config.database.model_dump().items():
            click.echo(f"  {key}: {value}")
        click.echo(f"  resolved path: {get_database_path()}")

        click.echo("\nLogging Settings (from YAML):")
        click.echo("-" * 40)
        for key, value in app_config.logging.model_dump().items():
            if isinstance(value, dict):
                click.echo(f"  {key}:")
                for k, v in value.items():
                    click.echo(f"    {k}: {v}")
            else:
                click.echo(f"  {key}: {value}")

        logger.info("Configuration displayed successfully")

    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def show_info(logger) -> None:
    """Display application information."""
    click.echo("adnotes")
    click.echo("=" * 40)

    try:
        from adnotes.backend.core.config import get_app_config
        app_config = get_app_config()
        click.echo(f"Name: {app_config.application.name}")
        click.echo(f"Version: {app_config.application.version}")
        click.echo(f"Description: {app_config.application.description}")
    except (FileNotFoundError, ValueError) as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style(
                "Error: Could not load application.yaml configuration.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  tui            Note window (default)")
    click.echo("  check-index    Verify the full-text index against the notes")
    click.echo("  reindex        Rebuild the full-text index")
    click.echo("  stats          Show note counts")
    click.echo("  config         Display configuration")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Window modes (--mode, tui only):")
    click.echo("  compose        Write a new note (default)")
    click.echo("  server         Show that the server is running")
    click.echo("  stop-server    Ask before terminating the server")
    click.echo()
    click.echo("Options:")
    click.echo("  --verbose, -v  Enable INFO level logging")
    click.echo("  --debug, -d    Enable DEBUG level logging")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
