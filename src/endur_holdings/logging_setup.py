"""Logging configuration for applications embedding endur_holdings."""

import logging

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """
    Route log records through a rich handler on the root logger.

    Parameters
    ----------
    level : str
        Level name (e.g. 'DEBUG'); unknown names fall back to INFO
    console : Console | None
        Rich console to write to (defaults to stderr)

    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(resolved)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
