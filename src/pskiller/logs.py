"""Logging setup.

The terminal is owned by the TUI, so log records go to a rotating file or
nowhere. The configured logger is handed to the components that log; none
of them reach for a shared buffer.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pskiller.config import LoggingConfig

LOGGER_NAME = "pskiller"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
MAX_BYTES = 1_000_000
BACKUP_COUNT = 3


def configure_logging(config: LoggingConfig, debug: bool = False) -> logging.Logger:
    """Configure and return the application logger.

    Args:
        config: Logging section of the configuration
        debug: Force DEBUG level and enable file logging

    Returns:
        The "pskiller" logger with a file handler, or a NullHandler when
        logging is disabled
    """
    log = logging.getLogger(LOGGER_NAME)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = False

    if not (config.enabled or debug):
        log.addHandler(logging.NullHandler())
        return log

    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG if debug else config.level)
    return log
