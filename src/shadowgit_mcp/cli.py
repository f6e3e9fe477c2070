"""
cli.py - shadowgit-mcp entry point

Usage:
    shadowgit-mcp                       # Serve over stdio (MCP clients)
    shadowgit-mcp --log-level debug     # Verbose logs on stderr
    shadowgit-mcp --timeout 30000       # Per-command limit in ms

Register with an MCP client, e.g.:
    claude mcp add shadowgit -- shadowgit-mcp
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys
import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.panel import Panel

from .config.settings import load_settings, normalize_log_level
from .log_config import configure_logging
from .server import create_server

log = structlog.get_logger("shadowgit.cli")

err_console = Console(stderr=True)

app = typer.Typer(
    name="shadowgit-mcp",
    help="Read-only MCP server for ShadowGit repositories",
    add_completion=False,
)


class GracefulShutdown:
    """First signal starts a short grace window, later signals are ignored.

    The grace window lets an in-flight git call finish before the process
    exits.
    """

    def __init__(self, grace: float, exit_func: Callable[[int], None] = os._exit) -> None:
        self.grace = grace
        self.shutting_down = False
        self._exit_func = exit_func
        self._timer: threading.Timer | None = None

    def request(self, signum: int | None = None, frame: object = None) -> None:
        if self.shutting_down:
            return
        self.shutting_down = True
        log.info("shutdown.requested", signal=signum, grace=self.grace)
        self._timer = threading.Timer(self.grace, self._exit_func, args=(0,))
        self._timer.daemon = True
        self._timer.start()

    def install(self) -> None:
        signal.signal(signal.SIGINT, self.request)
        signal.signal(signal.SIGTERM, self.request)


@app.command()
def serve(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="debug | info | warn | error (default: SHADOWGIT_LOG_LEVEL or info)",
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        "-t",
        min=1,
        help="Per-command timeout in milliseconds (default: SHADOWGIT_TIMEOUT or 10000)",
    ),
) -> None:
    """Start the ShadowGit MCP server on stdio."""
    # Logging first: structlog's default logger would write to stdout
    configure_logging(normalize_log_level(os.environ.get("SHADOWGIT_LOG_LEVEL")))

    settings = load_settings()
    if log_level is not None:
        settings = replace(settings, log_level=normalize_log_level(log_level))
    if timeout is not None:
        settings = replace(settings, timeout_ms=timeout)
    configure_logging(settings.log_level, force=True)

    if err_console.is_terminal:
        err_console.print(
            Panel(
                f"[bold green]ShadowGit MCP Server[/bold green]\n"
                f"registry: {settings.registry_path}\n"
                f"timeout: {settings.timeout_ms} ms",
                style="green",
            )
        )

    server = create_server(settings)
    GracefulShutdown(settings.shutdown_grace).install()

    try:
        asyncio.run(server.run_stdio())
    except Exception as e:
        log.critical("server.transport_failed", error=str(e), exc_info=True)
        raise typer.Exit(code=1) from e


def main() -> None:
    app()


if __name__ == "__main__":
    sys.exit(main())
