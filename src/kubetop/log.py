"""Logging setup for kubetop.

The dashboard owns the terminal, so log records never go to stdout or
stderr. They are written to a file when logging is enabled and discarded
otherwise.
"""

import logging
from pathlib import Path

from kubetop.config import LoggingConfig

LOGGER_NAME = "kubetop"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(config: LoggingConfig, debug: bool = False) -> logging.Logger:
    """Configure the ``kubetop`` logger.

    Args:
        config: Logging section of the application configuration
        debug: Force file logging at DEBUG level

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if not (config.enabled or debug):
        logger.addHandler(logging.NullHandler())
        return logger

    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else config.level)
    logger.debug("Logging to %s", path)
    return logger
