"""Logging configuration for the application."""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from beer_sim.core.config import settings


def setup_logging(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration.

    Args:
        name: Name of the logger. If None, configures the package logger.
        level: Overrides ``settings.LOG_LEVEL`` when given.

    Returns:
        Configured logger instance.
    """
    formatter = logging.Formatter(settings.LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger = logging.getLogger(name or "beer_sim")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    # Add handlers if they haven't been added before
    if not logger.handlers:
        logger.addHandler(console_handler)

        if settings.LOG_TO_FILE:
            log_dir = Path(settings.LOG_DIR)
            log_dir.mkdir(parents=True, exist_ok=True)

            # Create a file handler that rotates log files
            file_handler = RotatingFileHandler(
                log_dir / "beer_sim.log", maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    # Prevent logging from propagating to the root logger
    logger.propagate = False

    return logger
