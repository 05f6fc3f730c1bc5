"""Logging configuration for the application."""
import logging
import sys

from .config import settings


def setup_logging(name: str = "toonview") -> logging.Logger:
    """Attach a console handler to the package logger."""
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL.upper())

    # Prevent duplicate handlers
    if not logger.handlers:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(console)

    return logger
