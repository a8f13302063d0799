"""Logging configuration for the filewalk CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import VALID_LOG_LEVELS
from .errors import ConfigurationError

LOGGER_NAME = "filewalk"


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Set up console and optional file logging for the package logger.

    Args:
        level: Log level name.
        log_file: Optional file receiving DEBUG and above.

    Returns:
        Configured package logger.

    Raises:
        ConfigurationError: If the level name is not recognised.

    """
    level_name = level.upper()
    if level_name not in VALID_LOG_LEVELS:
        raise ConfigurationError(f"Invalid log_level: {level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else getattr(logging, level_name))

    # Clear existing handlers to avoid duplicates on reconfiguration
    if logger.handlers:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(getattr(logging, level_name))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logger.addHandler(file_handler)

    return logger
