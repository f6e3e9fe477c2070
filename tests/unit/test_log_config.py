"""
Logging must never touch stdout: in stdio mode stdout is the MCP stream.
"""

import logging

import pytest

from shadowgit_mcp.log_config import configure_logging, get_logger


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def test_logs_go_to_stderr(capsys, restore_root_logging):
    configure_logging("INFO", force=True)
    get_logger("shadowgit.test").info("registry.loaded", count=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "registry.loaded" in captured.err
    assert "count=3" in captured.err


def test_level_filters(capsys, restore_root_logging):
    configure_logging("WARNING", force=True)
    log = get_logger("shadowgit.test")
    log.info("quiet.event")
    log.warning("loud.event")

    err = capsys.readouterr().err
    assert "quiet.event" not in err
    assert "loud.event" in err


def test_mcp_sdk_logger_quieted(restore_root_logging):
    configure_logging("DEBUG", force=True)
    assert logging.getLogger("mcp").level == logging.WARNING



def test_single_unfiltered_stderr_handler(restore_root_logging):
    configure_logging("INFO", force=True)
    (handler,) = logging.getLogger().handlers
    assert isinstance(handler, logging.StreamHandler)
    assert handler.filters == []
