"""Diagnostic channel setup.

Modules log through ``logging.getLogger(__name__)``; this only decides where
the ``toolbridge`` logger tree ends up when running from the CLI.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "toolbridge"


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> logging.Logger:
    """Route toolbridge logs to stderr through rich. Safe to call repeatedly."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level if isinstance(level, int) else level.upper())

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
