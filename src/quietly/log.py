"""Logging setup for quietly.

Library modules only create ``logging.getLogger(__name__)`` loggers; the CLI
installs a Rich handler on the package logger.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "quietly"


def configure_logging(level: str = "WARNING", console: Optional[Console] = None) -> logging.Logger:
    """Attach a RichHandler to the package logger.

    Calling this more than once only updates the level.

    Args:
        level: Log level name
        console: Console to write to (default: stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
