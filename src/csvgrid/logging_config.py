"""
Logging configuration for the csvgrid namespace.

Library modules only create module loggers (logging.getLogger(__name__))
and log at DEBUG; applications call setup_logging() to see them.
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'csvgrid' logger.

    Args:
        level: Logging level (e.g. logging.DEBUG)
        log_file: Optional path to also write logs to

    Returns:
        The configured logger
    """
    logger = logging.getLogger("csvgrid")
    logger.setLevel(level)

    # Avoid duplicate output when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
