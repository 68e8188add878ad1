"""
Logging setup for the ``rtrace`` logger namespace.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by the entry points in ``main``.
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "rtrace"
LOG_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route ``rtrace`` log records to stdout and optionally to a file.

    Calling it again replaces the handlers of the previous call.

    Parameters
    ----------
    level : int, optional
        Threshold for the logger and its handlers, by default logging.INFO
    log_file : Optional[str], optional
        Path of a log file to write as well, truncated on open, by default None

    Returns
    -------
    logging.Logger
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized at level %s", logging.getLevelName(level))
    return logger
