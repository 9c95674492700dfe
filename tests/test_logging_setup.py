"""Tests for logging configuration."""

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from endur_holdings.logging_setup import configure_logging


def _rich_handlers() -> list[logging.Handler]:
    return [handler for handler in logging.getLogger().handlers if isinstance(handler, RichHandler)]


def test_sets_info_level():
    """Test INFO level."""
    configure_logging("INFO")
    assert logging.getLogger().level == logging.INFO


def test_sets_debug_level():
    """Test DEBUG level, case-insensitive."""
    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG


def test_silences_http_clients():
    """Test that httpx chatter is raised to WARNING."""
    configure_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_invalid_level_defaults_to_info():
    """Test fallback for an unknown level name."""
    configure_logging("NONEXISTENT")
    assert logging.getLogger().level == logging.INFO


def test_single_rich_handler():
    """Test that reconfiguring replaces the previous rich handler."""
    configure_logging("INFO")
    configure_logging("INFO")
    assert len(_rich_handlers()) == 1


def test_writes_to_console():
    """Test that records reach the given console."""
    buffer = io.StringIO()
    configure_logging("INFO", console=Console(file=buffer, width=200))

    logging.getLogger("endur_holdings.test").info("vesu holdings fetched")

    assert "vesu holdings fetched" in buffer.getvalue()
