from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "filletkit"


def setup_logging(level: int = logging.INFO, console: Console | None = None) -> logging.Logger:
    """Route the ``filletkit`` logger through rich.

    Safe to call repeatedly (e.g. on hot reload); existing handlers are replaced.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        logger.handlers.clear()

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    return logger
