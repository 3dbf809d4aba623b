"""Logging setup for the host game.

Modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves; the host calls ``configure_logging`` once at startup.
"""

from __future__ import annotations

import logging
import sys

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO, rich_output: bool = True) -> logging.Logger:
    """Attach a single handler to the ``autoinvaders`` logger.

    ``rich_output`` renders through rich for interactive terminals; pass False
    for plain lines (log files, CI). Calling again replaces the handler.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if rich_output:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger("autoinvaders")
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
