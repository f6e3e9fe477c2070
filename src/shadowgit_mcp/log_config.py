"""
log_config.py - Global logging configuration

UNIX Philosophy - logs go to stderr, results go to stdout.

In stdio mode stdout carries the MCP protocol stream, so every log line
(ours and third-party) must land on stderr.

Usage:
    from shadowgit_mcp.log_config import configure_logging, get_logger
    configure_logging(level="INFO")
    log = get_logger("shadowgit.server")
    log.info("registry.loaded", count=3)
"""

from __future__ import annotations

import logging
import sys

import structlog

_configured = False


def configure_logging(level: str = "INFO", force: bool = False) -> None:
    """Configure global logging to send all logs to stderr.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        force: Reconfigure even if logging was already set up
    """
    global _configured

    if _configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    # 1. Standard logging (captures the MCP SDK's own loggers too)
    root_logger = logging.getLogger()
    root_logger.handlers = []

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(log_level)

    # 2. Structlog. No ANSI colors: some MCP clients capture stderr verbatim.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # The low-level MCP server logs every request at INFO
    logging.getLogger("mcp").setLevel(max(log_level, logging.WARNING))

    _configured = True


def get_logger(name: str = "shadowgit") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name

    Returns:
        BoundLogger instance
    """
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
