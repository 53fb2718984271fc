"""
Logging Configuration
Routes the records of every ``layerthermal.*`` module logger to stdout and, optionally, a file.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "layerthermal"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach console (and file) handlers to the package logger.

    Calling it again replaces the handlers of the previous call, so a CLI run
    inside a long-lived process does not duplicate its output.

    Args:
        level: Threshold for the package logger and its handlers.
        log_file: Optional path; the file is overwritten.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging to {len(handlers)} handler(s) at level {logging.getLevelName(level)}.")
    return logger
